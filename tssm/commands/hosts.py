"""
Catalog Commands

List catalog hosts and show where the catalog is read from.
"""

import rich_click as click

from tssm.base import HostCommand


class HostsCommand(HostCommand):
    """List catalog hosts, one line each."""

    def __init__(self, settings, tag: str = None):
        super().__init__(settings)
        self.tag = tag

    def execute(self) -> None:
        catalog = self.ensure_catalog()
        hosts = catalog.effective_hosts()
        if self.tag:
            hosts = [h for h in hosts if self.tag in h.tags]

        if not hosts:
            self.print_dim("No hosts in catalog")
            return

        for host in hosts:
            click.echo(host.describe())


class ConfigPathCommand(HostCommand):
    """Print the catalog path in use."""

    def execute(self) -> None:
        loader = self.catalog_loader()
        path = loader.find()
        if path is None:
            path = loader.candidates()[0]
            self.print_dim("Catalog does not exist yet")
        click.echo(str(path))


@click.command(name="hosts")
@click.option("--tag", default=None, help="Only hosts carrying this tag")
@click.pass_obj
def hosts(settings, tag):
    """
    List catalog hosts

    Format: name [group] as user :port via jump tags:...
    """
    HostsCommand(settings, tag=tag).run()


@click.command(name="config-path")
@click.pass_obj
def config_path(settings):
    """Print the resolved host catalog path"""
    ConfigPathCommand(settings).run()
