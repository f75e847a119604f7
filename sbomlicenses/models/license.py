from dataclasses import dataclass
from enum import Enum

from sbomlicenses.models.component import Component

DEFAULT_LICENSE_FILE_NAME = 'LICENSE'
NO_LICENSE_FOUND = 'No license file found'


@dataclass(frozen=True)
class LicenseArtifact:
    """License file content returned by a single source."""
    content: bytes
    file_name: str = DEFAULT_LICENSE_FILE_NAME
    spdx_id: str | None = None
    license_name: str | None = None


class SourceStatus(str, Enum):
    FOUND = 'found'
    NOT_FOUND = 'not_found'
    ERROR = 'error'


@dataclass(frozen=True)
class SourceResult:
    """Outcome of asking one source for a license."""
    status: SourceStatus
    source: str
    artifact: LicenseArtifact | None = None
    message: str | None = None

    @classmethod
    def from_artifact(cls, source: str, artifact: LicenseArtifact | None) -> 'SourceResult':
        # An empty payload is no better than no payload at all
        if artifact is None or not artifact.content:
            return cls(SourceStatus.NOT_FOUND, source)
        return cls(SourceStatus.FOUND, source, artifact=artifact)

    @classmethod
    def error(cls, source: str, message: str) -> 'SourceResult':
        return cls(SourceStatus.ERROR, source, message=message)

    @property
    def found(self) -> bool:
        return self.status is SourceStatus.FOUND


@dataclass
class LicenseDownloadResult:
    """Resolution outcome for one component."""
    success: bool
    component: Component
    content: bytes | None = None
    original_file_name: str | None = None
    error_message: str | None = None
    source: str | None = None
    spdx_id: str | None = None
    license_name: str | None = None

    @classmethod
    def found(cls, component: Component, result: SourceResult) -> 'LicenseDownloadResult':
        artifact = result.artifact
        return cls(
            success=True,
            component=component,
            content=artifact.content,
            original_file_name=artifact.file_name,
            source=result.source,
            spdx_id=artifact.spdx_id,
            license_name=artifact.license_name,
        )

    @classmethod
    def failed(cls, component: Component, error_message: str = NO_LICENSE_FOUND) -> 'LicenseDownloadResult':
        return cls(success=False, component=component, error_message=error_message)
