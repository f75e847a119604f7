import base64
import binascii

import requests
import structlog
from pydantic import ValidationError
from ratelimit import limits
from ratelimit import sleep_and_retry

from sbomlicenses.core.github import parse_github_url
from sbomlicenses.models.github_license import GitHubLicenseResponse
from sbomlicenses.models.license import DEFAULT_LICENSE_FILE_NAME
from sbomlicenses.models.license import LicenseArtifact

logger = structlog.get_logger('github_service')

# GitHub core API: 5000/hour with a token -> 4500 for safety
CORE_CALLS = 4500
CORE_PERIOD = 3600


class GitHubLicenseService:
    """Fetches the detected license file of a repository from the GitHub REST API."""

    def __init__(
        self,
        session: requests.Session,
        token: str | None = None,
        api_base_url: str = 'https://api.github.com',
        user_agent: str = 'SBOM-License-Downloader/1.0',
        timeout: int = 30,
    ):
        self.api_base_url = api_base_url.rstrip('/')
        self.timeout = timeout
        self.headers = {
            'Accept': 'application/vnd.github+json',
            'User-Agent': user_agent,
        }
        if token:
            self.headers['Authorization'] = f"Bearer {token}"
        self.session = session

    @sleep_and_retry
    @limits(calls=CORE_CALLS, period=CORE_PERIOD)
    def _make_core_request(self, url: str) -> requests.Response:
        """Rate-limited core API request."""
        return self.session.get(url, headers=self.headers, timeout=self.timeout)

    def get_license(self, repository_url: str) -> LicenseArtifact | None:
        """Resolve a repository URL and fetch its license."""
        repo_info = parse_github_url(repository_url)
        if repo_info is None:
            logger.debug('Not a GitHub repository URL', url=repository_url)
            return None
        return self.fetch(*repo_info)

    def fetch(self, owner: str, repo: str) -> LicenseArtifact | None:
        repo_name = f"{owner}/{repo}"
        url = f"{self.api_base_url}/repos/{owner}/{repo}/license"

        try:
            response = self._make_core_request(url)
        except requests.RequestException as e:
            logger.warning(
                'HTTP error retrieving license from GitHub',
                repo=repo_name, error=str(e),
            )
            return None

        if response.status_code != 200:
            logger.debug(
                'GitHub license request failed',
                repo=repo_name, status=response.status_code,
            )
            return None

        try:
            payload = GitHubLicenseResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning(
                'Error parsing GitHub API response',
                repo=repo_name, error=str(e),
            )
            return None

        if payload.content is None or payload.encoding != 'base64':
            logger.warning(
                'Unexpected GitHub API response format',
                repo=repo_name, encoding=payload.encoding,
            )
            return None

        encoded = payload.content.replace('\n', '').replace('\r', '')
        try:
            content = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.warning(
                'Error decoding base64 license content',
                repo=repo_name, error=str(e),
            )
            return None

        spdx_id = payload.license.spdx_id if payload.license else None
        logger.info(
            'Retrieved license from GitHub',
            repo=repo_name, spdx_id=spdx_id, size=len(content),
        )
        return LicenseArtifact(
            content=content,
            file_name=payload.name or DEFAULT_LICENSE_FILE_NAME,
            spdx_id=spdx_id,
            license_name=payload.license.name if payload.license else None,
        )
