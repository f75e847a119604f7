from collections.abc import Callable
from urllib.parse import unquote

import structlog

from sbomlicenses.models.component import Component
from sbomlicenses.models.license import LicenseArtifact
from sbomlicenses.models.license import LicenseDownloadResult
from sbomlicenses.models.license import SourceResult
from sbomlicenses.services.github_service import GitHubLicenseService
from sbomlicenses.services.nuget_service import NuGetLicenseService
from sbomlicenses.services.url_service import UrlLicenseService

logger = structlog.get_logger('resolver_service')

# Returns None when the strategy does not apply or finds nothing
Strategy = Callable[[Component], LicenseArtifact | None]


def parse_package_url(purl: str | None) -> tuple[str, str] | None:
    """
    Extract ``(name, version)`` from a package URL.

    ``pkg:nuget/Newtonsoft.Json@13.0.3?repository_url=x`` -> ``('Newtonsoft.Json', '13.0.3')``
    """
    if not purl or not purl.startswith('pkg:'):
        return None

    locator = purl.split('#', 1)[0].split('?', 1)[0]
    segments = locator.split('/')
    if len(segments) < 2:
        return None

    name_version = segments[-1].split('@')
    if len(name_version) != 2:
        return None

    name, version = (unquote(part) for part in name_version)
    if not name or not version:
        return None
    return name, version


class LicenseResolver:
    """
    Finds a license for a component by trying each source in a fixed order:

    1. GitHub license API, for a github.com repository URL
    2. The component's license URL
    3. The NuGet package named by the package URL
    4. The NuGet package named by the component itself
    """

    def __init__(
        self,
        url_service: UrlLicenseService,
        nuget_service: NuGetLicenseService,
        github_service: GitHubLicenseService | None = None,
    ):
        self.url_service = url_service
        self.nuget_service = nuget_service
        self.github_service = github_service
        self.strategies: list[tuple[str, Strategy]] = [
            ('github', self._from_github),
            ('url', self._from_license_url),
            ('nuget-purl', self._from_package_url),
            ('nuget', self._from_component_name),
        ]

    def _from_github(self, component: Component) -> LicenseArtifact | None:
        if self.github_service is None or not component.repository_url:
            return None
        return self.github_service.get_license(component.repository_url)

    def _from_license_url(self, component: Component) -> LicenseArtifact | None:
        if not component.license_url:
            return None
        return self.url_service.fetch(component.license_url)

    def _from_package_url(self, component: Component) -> LicenseArtifact | None:
        package = parse_package_url(component.package_url)
        if package is None:
            return None
        return self.nuget_service.fetch(*package)

    def _from_component_name(self, component: Component) -> LicenseArtifact | None:
        return self.nuget_service.fetch(component.name, component.version)

    def _attempt(self, source: str, strategy: Strategy, component: Component) -> SourceResult:
        try:
            return SourceResult.from_artifact(source, strategy(component))
        except Exception as e:
            logger.warning(
                'License source failed',
                component=component.name, source=source, error=str(e),
            )
            return SourceResult.error(source, str(e))

    def resolve(self, component: Component) -> LicenseDownloadResult:
        logger.info('Resolving license', component=str(component))

        for source, strategy in self.strategies:
            result = self._attempt(source, strategy, component)
            if result.found:
                logger.info(
                    'License found',
                    component=component.name,
                    version=component.version,
                    source=source,
                    file=result.artifact.file_name,
                )
                return LicenseDownloadResult.found(component, result)

        logger.warning(
            'Could not download license',
            component=component.name, version=component.version,
        )
        return LicenseDownloadResult.failed(component)
