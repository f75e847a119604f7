import typer

from sbomlicenses.commands import components
from sbomlicenses.commands import download
from sbomlicenses.core.logging import setup_logging

app = typer.Typer(
    help='SBOM License Downloader: fetch license files for every package in an SBOM.',
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)

app.command(name='download')(download.main)
app.command(name='components')(components.main)


@app.callback()
def main(
    debug: bool = typer.Option(False, '--debug', help='Enable debug logging'),
):
    """
    SBOM License Downloader CLI.
    """
    level = 'DEBUG' if debug else 'INFO'
    setup_logging(level=level)


if __name__ == '__main__':
    app()
