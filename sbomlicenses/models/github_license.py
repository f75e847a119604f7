from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class GitHubLicenseInfo(BaseModel):
    key: str | None = None
    name: str | None = None
    spdx_id: str | None = None
    url: str | None = None

    model_config = ConfigDict(extra='ignore')


class GitHubLicenseResponse(BaseModel):
    """Body of ``GET /repos/{owner}/{repo}/license``."""
    name: str | None = None
    path: str | None = None
    content: str | None = None
    encoding: str | None = None
    license: GitHubLicenseInfo | None = Field(default=None)

    model_config = ConfigDict(extra='ignore')
