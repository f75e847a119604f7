import concurrent.futures
from collections.abc import Callable
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog
from pydantic import ValidationError

from sbomlicenses.core.exclusion import ExclusionMatcher
from sbomlicenses.core.storage import LicenseStorage
from sbomlicenses.core.validation import SbomValidationError
from sbomlicenses.models.component import Component
from sbomlicenses.models.summary import RunSummary
from sbomlicenses.services.resolver_service import LicenseResolver
from sbomlicenses.services.sbom_service import SbomReader

logger = structlog.get_logger('orchestrator_service')

SAVE_FAILED = 'Failed to save file'


@dataclass
class ComponentResult:
    component: Component
    success: bool
    error: str | None = None
    path: Path | None = None
    source: str | None = None
    spdx_id: str | None = None

    @property
    def failure_description(self) -> str:
        return f"{self.component.name}: {self.error}"


class LicenseDownloadOrchestrator:
    """Reads an SBOM, resolves every eligible component concurrently and saves the licenses."""

    def __init__(
        self,
        sbom_reader: SbomReader,
        resolver: LicenseResolver,
        storage: LicenseStorage,
        exclusions: ExclusionMatcher | None = None,
        workers: int = 8,
    ):
        self.sbom_reader = sbom_reader
        self.resolver = resolver
        self.storage = storage
        self.exclusions = exclusions or ExclusionMatcher()
        self.workers = max(1, workers)

    def process_component(self, component: Component) -> ComponentResult:
        """Resolve and save one component; never raises."""
        try:
            result = self.resolver.resolve(component)
            if not result.success:
                return ComponentResult(component, False, result.error_message or 'Download failed')

            path = self.storage.save(result)
            if path is None:
                return ComponentResult(component, False, SAVE_FAILED)
            return ComponentResult(
                component, True, path=path, source=result.source, spdx_id=result.spdx_id,
            )
        except Exception as e:
            logger.exception('Error processing component', component=component.name)
            return ComponentResult(component, False, str(e))

    def run(
        self,
        components: Sequence[Component],
        sbom_path: str = '',
        on_progress: Callable[[ComponentResult], None] | None = None,
    ) -> RunSummary:
        summary = RunSummary(sbom_path=sbom_path, total_components=len(components))

        eligible = []
        for component in components:
            if self.exclusions.is_excluded(component.name):
                logger.info('Excluding package', component=component.name)
                summary.excluded_packages += 1
            else:
                eligible.append(component)

        logger.info(
            'Downloading licenses',
            eligible=len(eligible), excluded=summary.excluded_packages,
        )

        results: list[ComponentResult] = []
        if eligible:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.workers) as executor:
                futures = [executor.submit(self.process_component, c) for c in eligible]
                for future in concurrent.futures.as_completed(futures):
                    result = future.result()
                    results.append(result)
                    if on_progress:
                        on_progress(result)

        summary.successful_downloads = sum(1 for r in results if r.success)
        summary.failed_downloads = sum(1 for r in results if not r.success)
        summary.failed_components = [r.failure_description for r in results if not r.success]

        stats = self.storage.stats()
        summary.total_files_created = stats.total_files
        summary.total_size_bytes = stats.total_size_bytes
        summary.output_directory = stats.output_directory

        logger.info(
            'Download process complete',
            successful=summary.successful_downloads,
            failed=summary.failed_downloads,
            excluded=summary.excluded_packages,
            total=summary.total_components,
            files=stats.total_files,
            size=stats.size_formatted,
        )
        for failed in summary.failed_components:
            logger.warning('Failed component', detail=failed)

        return summary

    def read_components(self, sbom_path: str | Path) -> list[Component]:
        return self.sbom_reader.read_components(sbom_path)

    def execute(
        self,
        sbom_path: str | Path,
        on_progress: Callable[[ComponentResult], None] | None = None,
        on_components: Callable[[list[Component]], None] | None = None,
    ) -> RunSummary:
        """Full workflow: read the SBOM, then run. Unreadable SBOMs are fatal."""
        try:
            components = self.read_components(sbom_path)
        except (OSError, SbomValidationError, ValidationError) as e:
            logger.error('Fatal error reading SBOM', path=str(sbom_path), error=str(e))
            return RunSummary(sbom_path=str(sbom_path), fatal_error=str(e))

        if not components:
            logger.warning('No components found in SBOM', path=str(sbom_path))

        if on_components:
            on_components(components)
        return self.run(components, sbom_path=str(sbom_path), on_progress=on_progress)
