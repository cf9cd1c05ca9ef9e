"""
tssm Constants

Centralized constants for magic values, defaults, and configuration.
"""

# Program identity
DEFAULT_BIN_NAME = "tssm"
APP_NAME = "tssm"

# Environment variables
ENV_SELF_BIN = "TSSM_BIN"
ENV_CONFIG = "TSSM_CONFIG"
ENV_LOG = "TSSM_LOG"
ENV_SSH_MUX = "TSSM_SSH_MUX"
ENV_SSH_MUX_PATH = "TSSM_SSH_MUX_PATH"
ENV_TMUX = "TMUX"

# Config file layout
CATALOG_FILENAME = "hosts.yaml"
EXTRAS_DIRNAME = "hosts"
LOGS_DIRNAME = "logs"

# SSH defaults
DEFAULT_SSH_PORT = 22
SSH_BINARY = "ssh"
SCP_BINARY = "scp"

# Options forced on the client when a password is injected; public-key auth is
# disabled so the injected secret is actually consumed.
AUTOMATION_SSH_OPTIONS = [
    "-o",
    "PreferredAuthentications=keyboard-interactive,password",
    "-o",
    "PubkeyAuthentication=no",
    "-o",
    "NumberOfPasswordPrompts=1",
]

# SSH connection multiplexing (ControlMaster)
SSH_MUX_PERSIST = "10m"
SSH_MUX_DIRNAME = "mux"

# Prompt detection
PROMPT_DETECTION_WINDOW = 30.0
PROMPT_TAIL_LIMIT = 2048
PROMPT_PATTERN = r"(password|passcode|pass phrase|passphrase)\s*:?\s*$"

# PTY pumping
PTY_READ_SIZE = 4096
STDIN_READ_SIZE = 1024
INPUT_POLL_INTERVAL = 0.05
INPUT_JOIN_TIMEOUT = 1.0

# tmux
TMUX_BINARY = "tmux"
TMUX_WRAPPER_SESSION = "tssm-ssh"
TMUX_START_DIRECTORY = "#{pane_current_path}"
TMUX_SHELL = ["bash", "-lc"]

# Credential kinds
CREDENTIAL_KINDS = ("password", "passphrase", "otp")

# Askpass wrapper
ASKPASS_WRAPPER_PREFIX = "tssm-askpass-"
ASKPASS_ENV = {
    "SSH_ASKPASS_REQUIRE": "force",
    "DISPLAY": "1",
}

# Log Configuration
LOG_DATE_FORMAT = "%Y-%m-%d"
LOG_TIME_FORMAT = "%H-%M-%S"
