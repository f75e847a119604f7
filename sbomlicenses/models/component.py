from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

UNKNOWN_VERSION = 'unknown'


class Component(BaseModel):
    """A package declared in an SBOM, normalized across SBOM dialects."""
    name: str = Field(min_length=1)
    version: str = UNKNOWN_VERSION
    licenses: tuple[str, ...] = ()
    license_url: str | None = None
    package_url: str | None = None
    repository_url: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator('version', mode='before')
    @classmethod
    def default_version(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            return UNKNOWN_VERSION
        return str(v)

    @field_validator('license_url', 'package_url', 'repository_url', mode='before')
    @classmethod
    def blank_to_none(cls, v: Any) -> str | None:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    def __str__(self) -> str:
        return f"{self.name}@{self.version} - Licenses: {', '.join(self.licenses)}"
