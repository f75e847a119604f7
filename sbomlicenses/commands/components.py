from pathlib import Path

import typer
from rich.table import Table

from sbomlicenses.core.config import LicenseDownloaderConfig
from sbomlicenses.core.decorators import handle_errors
from sbomlicenses.core.exclusion import ExclusionMatcher
from sbomlicenses.core.logging import console
from sbomlicenses.services.sbom_service import SbomReader


@handle_errors
def main(
    sbom_path: str | None = typer.Argument(None, help='SBOM file (CycloneDX or SPDX JSON)'),
    config_file: Path | None = typer.Option(None, '--config', '-c', help='JSON config file'),
    exclude: list[str] | None = typer.Option(
        None, '--exclude', '-e', help='Package name wildcard to skip (repeatable)',
    ),
):
    """
    List the components of an SBOM and whether they would be excluded.
    """
    config = LicenseDownloaderConfig.load(config_file)
    path = sbom_path or config.sbom_path
    matcher = ExclusionMatcher.compile([*config.excluded_package_patterns, *(exclude or [])])

    components = SbomReader().read_components(path)

    table = Table(title=f"Components in {path}")
    table.add_column('Name', style='cyan')
    table.add_column('Version', style='magenta')
    table.add_column('Licenses')
    table.add_column('Repository', style='dim')
    table.add_column('Excluded', justify='center')

    excluded = 0
    for component in components:
        is_excluded = matcher.is_excluded(component.name)
        excluded += is_excluded
        table.add_row(
            component.name,
            component.version,
            ', '.join(component.licenses),
            component.repository_url or '',
            '[yellow]yes[/yellow]' if is_excluded else '',
        )

    console.print(table)
    console.print(f"{len(components)} components, {excluded} excluded")
