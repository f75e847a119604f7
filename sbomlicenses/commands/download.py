from pathlib import Path

import dotenv
import structlog
import typer
from rich.progress import BarColumn
from rich.progress import MofNCompleteColumn
from rich.progress import Progress
from rich.progress import SpinnerColumn
from rich.progress import TextColumn
from rich.progress import TimeElapsedColumn
from rich.table import Table

from sbomlicenses.__version__ import __version__
from sbomlicenses.core.config import LicenseDownloaderConfig
from sbomlicenses.core.container import Container
from sbomlicenses.core.decorators import handle_errors
from sbomlicenses.core.github import warn_missing_token
from sbomlicenses.core.logging import console
from sbomlicenses.models.summary import RunSummary
from sbomlicenses.services.orchestrator_service import ComponentResult

dotenv.load_dotenv()
logger = structlog.get_logger('download_command')

USAGE = """[bold]Usage:[/]
  sbom-licenses download [sbom-path] [output-directory]

[bold]Examples:[/]
  sbom-licenses download ./sbom.json ./licenses
  sbom-licenses download ./my-project-sbom.json

Configuration can also be set in sbom-licenses.json (see --config)."""


def apply_overrides(
    config: LicenseDownloaderConfig,
    sbom_path: str | None = None,
    output_dir: str | None = None,
    token: str | None = None,
    exclude: list[str] | None = None,
    workers: int | None = None,
    overwrite: bool = False,
    extension: str | None = None,
    no_github: bool = False,
) -> LicenseDownloaderConfig:
    """Command-line values take precedence over the config file."""
    if sbom_path:
        config.sbom_path = sbom_path
    if output_dir:
        config.output_directory = output_dir
    if token:
        config.github.token = token
    if exclude:
        config.excluded_package_patterns = [*config.excluded_package_patterns, *exclude]
    if workers:
        config.workers = workers
    if overwrite:
        config.overwrite_existing_files = True
    if extension:
        config.default_file_extension = extension
    if no_github:
        config.use_github_api = False
    return config


def progress_status(result: ComponentResult) -> str:
    """Short rich markup for the last finished component."""
    name = result.component.name
    if not result.success:
        return f"[red]{name}[/red]"
    detail = result.source or ''
    if result.spdx_id:
        detail = f"{detail} {result.spdx_id}".strip()
    return f"[green]{name}[/green] [dim]({detail})[/dim]" if detail else f"[green]{name}[/green]"


def print_configuration(config: LicenseDownloaderConfig) -> None:
    console.print(f"[bold]SBOM License Downloader[/] v{__version__}")
    table = Table(title='Configuration', show_header=False)
    table.add_column('Setting', style='cyan')
    table.add_column('Value', style='magenta')
    table.add_row('SBOM Path', config.sbom_path)
    table.add_row('Output Directory', config.output_directory)
    table.add_row('Default Extension', config.default_file_extension)
    table.add_row('Overwrite Existing', str(config.overwrite_existing_files))
    table.add_row('GitHub API', 'enabled' if config.use_github_api else 'disabled')
    table.add_row('Workers', str(config.workers))
    if config.excluded_package_patterns:
        table.add_row('Excluded Patterns', ', '.join(config.excluded_package_patterns))
    console.print(table)


def print_summary(summary: RunSummary) -> None:
    table = Table(title='License Download Summary')
    table.add_column('Metric', style='cyan')
    table.add_column('Value', style='magenta')

    table.add_row('Total Components', str(summary.total_components))
    table.add_row('Excluded Packages', str(summary.excluded_packages))
    table.add_row('Eligible Components', str(summary.eligible_components))
    table.add_row('Successful Downloads', str(summary.successful_downloads))
    table.add_row('Failed Downloads', str(summary.failed_downloads))
    table.add_row('Files in Output', str(summary.total_files_created))
    table.add_row('Total Size', summary.size_formatted)
    table.add_row('Output Directory', summary.output_directory)
    console.print(table)

    if summary.failed_components:
        console.print('[yellow]Failed components:[/]')
        for failed in sorted(summary.failed_components):
            console.print(f"  - {failed}")

    if summary.fatal_error:
        console.print(f"[bold red]Fatal error:[/] {summary.fatal_error}")


@handle_errors
def main(
    sbom_path: str | None = typer.Argument(
        None, help='SBOM file (CycloneDX or SPDX JSON)',
    ),
    output_dir: str | None = typer.Argument(
        None, help='Directory for downloaded license files',
    ),
    config_file: Path | None = typer.Option(
        None, '--config', '-c', help='JSON config file (default: sbom-licenses.json if present)',
    ),
    token: str | None = typer.Option(
        None, envvar='GITHUB_TOKEN', help='GitHub Token',
    ),
    exclude: list[str] | None = typer.Option(
        None, '--exclude', '-e', help='Package name wildcard to skip (repeatable)',
    ),
    workers: int | None = typer.Option(None, help='Number of concurrent workers'),
    overwrite: bool = typer.Option(False, '--overwrite', help='Overwrite existing license files'),
    extension: str | None = typer.Option(None, help='Extension for license files without one'),
    no_github: bool = typer.Option(False, '--no-github', help='Skip the GitHub license API'),
):
    """
    Download license files for every component of an SBOM.
    """
    config = apply_overrides(
        LicenseDownloaderConfig.load(config_file),
        sbom_path=sbom_path,
        output_dir=output_dir,
        token=token,
        exclude=exclude,
        workers=workers,
        overwrite=overwrite,
        extension=extension,
        no_github=no_github,
    )

    if not Path(config.sbom_path).exists():
        logger.error('SBOM file not found', path=config.sbom_path)
        console.print(USAGE)
        raise typer.Exit(1)

    print_configuration(config)
    if config.use_github_api:
        warn_missing_token(config.github.token, console)

    orchestrator = Container(config).create_orchestrator()

    with Progress(
        SpinnerColumn(),
        TextColumn('[progress.description]{task.description}'),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn('•'),
        TimeElapsedColumn(),
        TextColumn('•'),
        TextColumn('[dim]{task.fields[status]}', justify='left'),
        console=console,
    ) as progress:
        task = progress.add_task('Reading SBOM...', total=None, status='')

        def on_components(components):
            eligible = [c for c in components if not orchestrator.exclusions.is_excluded(c.name)]
            progress.update(task, description='Downloading licenses...', total=len(eligible))

        def on_progress(result):
            progress.update(task, advance=1, status=progress_status(result))

        summary = orchestrator.execute(
            config.sbom_path,
            on_progress=on_progress,
            on_components=on_components,
        )

    print_summary(summary)

    if summary.has_errors:
        logger.warning('Process completed with errors')
        raise typer.Exit(1)

    logger.info('Process completed successfully')
