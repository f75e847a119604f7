from importlib.metadata import PackageNotFoundError
from importlib.metadata import version


def get_version() -> str:
    """Installed distribution version, or a dev marker in a source checkout."""
    try:
        return version('sbom-licenses')
    except PackageNotFoundError:
        return '0.0.0-dev'


__version__ = get_version()
