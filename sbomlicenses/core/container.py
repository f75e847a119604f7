"""Dependency Injection Container."""
import requests

from sbomlicenses.core.client import get_http_client
from sbomlicenses.core.config import LicenseDownloaderConfig
from sbomlicenses.core.exclusion import ExclusionMatcher
from sbomlicenses.core.storage import LicenseStorage
from sbomlicenses.services.github_service import GitHubLicenseService
from sbomlicenses.services.nuget_service import NuGetLicenseService
from sbomlicenses.services.orchestrator_service import LicenseDownloadOrchestrator
from sbomlicenses.services.resolver_service import LicenseResolver
from sbomlicenses.services.sbom_service import SbomReader
from sbomlicenses.services.url_service import UrlLicenseService


class Container:
    """Wires services for one run from a configuration."""

    def __init__(self, config: LicenseDownloaderConfig, session: requests.Session | None = None) -> None:
        self.config = config
        self._session = session

    @property
    def session(self) -> requests.Session:
        """Shared HTTP session; all license sources reuse its connection pool."""
        if self._session is None:
            http = self.config.http
            self._session = get_http_client(
                cache_name=http.cache_name,
                expire_after=http.expire_after,
                pool_size=max(http.pool_size, self.config.workers),
                user_agent=self.config.github.user_agent,
            )
        return self._session

    def get_github_service(self) -> GitHubLicenseService | None:
        if not self.config.use_github_api:
            return None
        github = self.config.github
        return GitHubLicenseService(
            self.session,
            token=github.token,
            api_base_url=github.api_base_url,
            user_agent=github.user_agent,
            timeout=self.config.timeout,
        )

    def get_resolver(self) -> LicenseResolver:
        return LicenseResolver(
            url_service=UrlLicenseService(self.session, timeout=self.config.timeout),
            nuget_service=NuGetLicenseService(self.session, timeout=self.config.timeout),
            github_service=self.get_github_service(),
        )

    def get_storage(self) -> LicenseStorage:
        return LicenseStorage(
            self.config.output_directory,
            default_extension=self.config.default_file_extension,
            create_directory=self.config.create_output_directory,
            overwrite=self.config.overwrite_existing_files,
        )

    def get_sbom_reader(self) -> SbomReader:
        return SbomReader()

    def create_orchestrator(self) -> LicenseDownloadOrchestrator:
        """Factory for the orchestrator of one run."""
        return LicenseDownloadOrchestrator(
            sbom_reader=self.get_sbom_reader(),
            resolver=self.get_resolver(),
            storage=self.get_storage(),
            exclusions=ExclusionMatcher.compile(self.config.excluded_package_patterns),
            workers=self.config.workers,
        )
