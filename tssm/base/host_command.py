"""
Host Command Base Class

Base class for commands that work against the host catalog.
Provides lazy service initialization.
"""

from typing import Optional

from .base_command import BaseCommand
from tssm.core.config_loader import CatalogLoader, HostCatalog
from tssm.core.settings import Settings
from tssm.services import (
    CommandBuilder,
    ConnectService,
    DecisionEngine,
    HostExtrasService,
    HostResolver,
    KeyringSecretStore,
    ProcessRunner,
    SecretStore,
    TmuxService,
)


class HostCommand(BaseCommand):
    """
    Base class for catalog-aware commands.

    Provides:
    - Catalog loading
    - Pre-configured resolver, decision engine, builder and stores
    """

    def __init__(self, settings: Settings, verbose: bool = False):
        super().__init__(settings, verbose=verbose)
        self.catalog: Optional[HostCatalog] = None
        self.extras_service: Optional[HostExtrasService] = None
        self.secret_store: Optional[SecretStore] = None
        self.connect_service: Optional[ConnectService] = None
        self.process_runner = ProcessRunner()

    def catalog_loader(self) -> CatalogLoader:
        return CatalogLoader(self.settings.config_home, self.settings.config_path)

    def ensure_catalog(self) -> HostCatalog:
        """
        Ensure the host catalog is loaded.

        Returns:
            HostCatalog (empty when no catalog file exists)
        """
        if self.catalog is None:
            self.catalog = self.catalog_loader().load()
        return self.catalog

    def ensure_extras_service(self) -> HostExtrasService:
        if self.extras_service is None:
            self.extras_service = HostExtrasService(self.settings.extras_dir)
        return self.extras_service

    def ensure_secret_store(self) -> SecretStore:
        if self.secret_store is None:
            self.secret_store = KeyringSecretStore()
        return self.secret_store

    def command_builder(self) -> CommandBuilder:
        return CommandBuilder(self.settings, self.ensure_extras_service())

    def tmux_service(self) -> TmuxService:
        return TmuxService.from_settings(self.settings)

    def ensure_connect_service(self) -> ConnectService:
        """
        Ensure ConnectService is initialized.

        Returns:
            ConnectService wired to the catalog, keyring and host extras
        """
        if self.connect_service is None:
            secrets = self.ensure_secret_store()
            self.connect_service = ConnectService(
                resolver=HostResolver(self.ensure_catalog()),
                engine=DecisionEngine(secrets, self.ensure_extras_service()),
                builder=self.command_builder(),
                secrets=secrets,
                runner=self.process_runner,
            )
        return self.connect_service
