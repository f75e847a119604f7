"""Subsets of the CycloneDX and SPDX JSON documents that carry license data."""
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class _SbomModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')


class CycloneDxLicenseInfo(_SbomModel):
    id: str | None = None
    name: str | None = None
    url: str | None = None


class CycloneDxLicense(_SbomModel):
    license: CycloneDxLicenseInfo | None = None
    expression: str | None = None


class CycloneDxExternalReference(_SbomModel):
    type: str | None = None
    url: str | None = None


class CycloneDxComponent(_SbomModel):
    name: str | None = None
    version: str | None = None
    purl: str | None = None
    licenses: list[CycloneDxLicense] | None = None
    external_references: list[CycloneDxExternalReference] | None = Field(
        alias='externalReferences', default=None,
    )
    components: list['CycloneDxComponent'] | None = None


CycloneDxComponent.model_rebuild()


class CycloneDxBom(_SbomModel):
    bom_format: str | None = Field(alias='bomFormat', default=None)
    spec_version: str | None = Field(alias='specVersion', default=None)
    components: list[CycloneDxComponent] | None = None


class SpdxExternalRef(_SbomModel):
    reference_category: str | None = Field(alias='referenceCategory', default=None)
    reference_type: str | None = Field(alias='referenceType', default=None)
    reference_locator: str | None = Field(alias='referenceLocator', default=None)


class SpdxPackage(_SbomModel):
    spdx_id: str | None = Field(alias='SPDXID', default=None)
    name: str | None = None
    version_info: str | None = Field(alias='versionInfo', default=None)
    download_location: str | None = Field(alias='downloadLocation', default=None)
    homepage: str | None = None
    license_concluded: str | None = Field(alias='licenseConcluded', default=None)
    license_declared: str | None = Field(alias='licenseDeclared', default=None)
    external_refs: list[SpdxExternalRef] | None = Field(alias='externalRefs', default=None)


class SpdxDocument(_SbomModel):
    spdx_version: str | None = Field(alias='spdxVersion', default=None)
    spdx_id: str | None = Field(alias='SPDXID', default=None)
    name: str | None = None
    packages: list[SpdxPackage] | None = None
