from pathlib import PurePosixPath
from urllib.parse import unquote
from urllib.parse import urlsplit

import requests
import structlog

from sbomlicenses.models.license import DEFAULT_LICENSE_FILE_NAME
from sbomlicenses.models.license import LicenseArtifact

logger = structlog.get_logger('url_service')


def file_name_from_url(url: str) -> str:
    """Last path segment of a URL, or ``LICENSE`` when there is none."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return DEFAULT_LICENSE_FILE_NAME
    return PurePosixPath(unquote(path)).name or DEFAULT_LICENSE_FILE_NAME


class UrlLicenseService:
    """Downloads a license file from a direct URL."""

    def __init__(self, session: requests.Session, timeout: int = 30):
        self.session = session
        self.timeout = timeout

    def fetch(self, url: str) -> LicenseArtifact | None:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning('Error downloading license URL', url=url, error=str(e))
            return None

        if not 200 <= response.status_code < 300:
            logger.debug('License URL request failed', url=url, status=response.status_code)
            return None

        return LicenseArtifact(content=response.content, file_name=file_name_from_url(url))
