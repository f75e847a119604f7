from pathlib import Path

import structlog
from pydantic import ValidationError

from sbomlicenses.core.github import parse_github_url
from sbomlicenses.core.validation import detect_sbom_format
from sbomlicenses.core.validation import load_sbom_document
from sbomlicenses.core.validation import SbomFormat
from sbomlicenses.core.validation import SbomValidationError
from sbomlicenses.models.component import Component
from sbomlicenses.models.sbom import CycloneDxBom
from sbomlicenses.models.sbom import CycloneDxComponent
from sbomlicenses.models.sbom import SpdxDocument
from sbomlicenses.models.sbom import SpdxPackage

logger = structlog.get_logger('sbom_service')

# SPDX placeholders that mean "no value"
SPDX_EMPTY_VALUES = {'NOASSERTION', 'NONE', ''}


def _spdx_value(value: str | None) -> str | None:
    if value is None or value.strip().upper() in SPDX_EMPTY_VALUES:
        return None
    return value.strip()


def _spdx_repository_url(package: SpdxPackage) -> str | None:
    location = _spdx_value(package.download_location)
    if location:
        if location.startswith('git+'):
            location = location[len('git+'):]
        return location.split('#', 1)[0]

    homepage = _spdx_value(package.homepage)
    if homepage and parse_github_url(homepage):
        return homepage
    return None


class SbomReader:
    """Reads CycloneDX or SPDX JSON documents into components."""

    def read_components(self, sbom_path: str | Path) -> list[Component]:
        path = Path(sbom_path)
        logger.info('Reading SBOM file', path=str(path))

        document = load_sbom_document(path)
        sbom_format = detect_sbom_format(document)
        logger.info('Detected SBOM format', format=sbom_format.value)

        try:
            if sbom_format is SbomFormat.CYCLONEDX:
                components = self._parse_cyclonedx(CycloneDxBom.model_validate(document))
            else:
                components = self._parse_spdx(SpdxDocument.model_validate(document))
        except ValidationError as e:
            raise SbomValidationError(f"Malformed {sbom_format.value} document: {e}") from e

        logger.info(
            'Parsed components',
            format=sbom_format.value, count=len(components),
        )
        return components

    def _parse_cyclonedx(self, bom: CycloneDxBom) -> list[Component]:
        if not bom.components:
            logger.warning('No components found in CycloneDX SBOM')
            return []

        components = []
        stack = list(reversed(bom.components))
        while stack:
            item = stack.pop()
            if item.components:
                stack.extend(reversed(item.components))
            component = self._cyclonedx_component(item)
            if component is not None:
                components.append(component)
        return components

    def _cyclonedx_component(self, item: CycloneDxComponent) -> Component | None:
        if not item.name:
            return None

        licenses: list[str] = []
        license_url = None
        for choice in item.licenses or []:
            if choice.license and choice.license.id:
                licenses.append(choice.license.id)
                if choice.license.url:
                    license_url = choice.license.url
            elif choice.expression:
                licenses.append(choice.expression)

        # First reference of each kind wins; a license reference beats license.url
        references = item.external_references or []
        license_ref = next((r.url for r in references if (r.type or '').lower() == 'license' and r.url), None)
        repository_url = next((r.url for r in references if (r.type or '').lower() == 'vcs' and r.url), None)
        if license_ref:
            license_url = license_ref

        return Component(
            name=item.name,
            version=item.version,
            licenses=licenses,
            license_url=license_url,
            package_url=item.purl,
            repository_url=repository_url,
        )

    def _parse_spdx(self, document: SpdxDocument) -> list[Component]:
        if not document.packages:
            logger.warning('No packages found in SPDX SBOM')
            return []

        components = []
        for package in document.packages:
            if not package.name:
                continue

            licenses = []
            for expression in (package.license_declared, package.license_concluded):
                value = _spdx_value(expression)
                if value and value not in licenses:
                    licenses.append(value)

            purl = next(
                (
                    ref.reference_locator
                    for ref in package.external_refs or []
                    if (ref.reference_type or '').lower() == 'purl' and ref.reference_locator
                ),
                None,
            )

            components.append(
                Component(
                    name=package.name,
                    version=_spdx_value(package.version_info),
                    licenses=licenses,
                    package_url=purl,
                    repository_url=_spdx_repository_url(package),
                ),
            )
        return components
