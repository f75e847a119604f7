import io
import zipfile
import zlib
from pathlib import PurePosixPath

import requests
import structlog

from sbomlicenses.models.license import LicenseArtifact

logger = structlog.get_logger('nuget_service')

NUGET_FLAT_CONTAINER_URL = 'https://api.nuget.org/v3-flatcontainer'

# Searched in this order across the whole archive, compared case-insensitively
LICENSE_FILE_NAMES = (
    'LICENSE',
    'LICENSE.txt',
    'LICENSE.md',
    'LICENCE',
    'LICENCE.txt',
    'LICENCE.md',
    'COPYING',
    'COPYING.txt',
    'LICENSE-MIT',
    'LICENSE-APACHE',
)


def normalize_version(version: str) -> str:
    """Drop a leading ``v`` and any ``+build`` metadata: ``v1.2.3+b5`` -> ``1.2.3``."""
    version = version.lstrip('vV')
    plus = version.find('+')
    if plus > 0:
        version = version[:plus]
    return version


def find_license_entry(names: list[str]) -> str | None:
    """
    Pick the archive entry holding the license.

    Candidates are tried in LICENSE_FILE_NAMES order; for each candidate the
    entries are scanned in stored order and the first one whose name is the
    candidate, or ends with ``/`` + candidate, wins.
    """
    lowered = [(name, name.lower()) for name in names if not name.endswith('/')]
    for candidate in LICENSE_FILE_NAMES:
        wanted = candidate.lower()
        suffix = '/' + wanted
        for name, lower in lowered:
            if lower == wanted or lower.endswith(suffix):
                return name
    return None


class NuGetLicenseService:
    """Extracts license files from packages on the NuGet gallery."""

    def __init__(
        self,
        session: requests.Session,
        base_url: str = NUGET_FLAT_CONTAINER_URL,
        timeout: int = 30,
    ):
        self.session = session
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def package_url(self, package_name: str, version: str) -> str:
        package_id = package_name.lower()
        version = normalize_version(version).lower()
        return f"{self.base_url}/{package_id}/{version}/{package_id}.{version}.nupkg"

    def fetch(self, package_name: str, version: str) -> LicenseArtifact | None:
        url = self.package_url(package_name, version)
        package = f"{package_name}@{version}"

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning('Error downloading NuGet package', package=package, error=str(e))
            return None

        if response.status_code != 200:
            logger.debug('NuGet package not available', package=package, status=response.status_code)
            return None

        try:
            with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
                entry = find_license_entry(archive.namelist())
                if entry is None:
                    logger.debug('No license file in NuGet package', package=package)
                    return None
                content = archive.read(entry)
        # ValueError covers bad seek offsets and undecodable entry names
        except (
            zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError,
            RuntimeError, OSError, ValueError,
        ) as e:
            logger.warning('Error reading NuGet package', package=package, error=str(e))
            return None

        logger.info('Found license file in NuGet package', package=package, entry=entry)
        return LicenseArtifact(content=content, file_name=PurePosixPath(entry).name)
