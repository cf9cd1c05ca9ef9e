"""Tests for password prompt detection on the PTY output stream."""

import pytest

from tssm.services.pty_service import PromptDetector, wipe


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.mark.parametrize(
    "chunk",
    [
        b"admin@10.0.0.5's password: ",
        b"Password:",
        b"Enter passphrase: ",
        b"Passcode: ",
        b"\r\nPASSWORD: ",
    ],
)
def test_recognizes_common_prompts(chunk):
    assert PromptDetector().feed(chunk) is True


def test_prompt_split_across_reads():
    detector = PromptDetector()

    assert detector.feed(b"Warning: Permanently added 'web1'\r\n") is False
    assert detector.feed(b"admin@web1's pass") is False
    assert detector.feed(b"word: ") is True


def test_prompt_must_end_the_output():
    detector = PromptDetector()

    assert detector.feed(b"Your password will expire in 3 days\r\n$ ") is False


def test_matches_only_once():
    detector = PromptDetector()

    assert detector.feed(b"Password: ") is True
    assert detector.feed(b"\r\nPermission denied, please try again.\r\nPassword: ") is False
    assert detector.active is False


def test_window_expiry_stops_detection():
    clock = FakeClock()
    detector = PromptDetector(window=30.0, clock=clock)

    clock.now += 31.0

    assert detector.feed(b"Password: ") is False
    assert detector.active is False


def test_within_window_still_detects():
    clock = FakeClock()
    detector = PromptDetector(window=30.0, clock=clock)

    clock.now += 29.0

    assert detector.feed(b"Password: ") is True


def test_nul_bytes_are_ignored():
    assert PromptDetector().feed(b"Pass\x00word: ") is True


def test_tail_is_bounded():
    detector = PromptDetector(tail_limit=64)

    detector.feed(b"x" * 1000)

    assert len(detector._tail) <= 64


def test_wipe_zeroes_in_place():
    secret = bytearray(b"hunter2")
    alias = secret

    wipe(secret)

    assert alias == bytearray(7)
    wipe(None)
