"""Configuration management for the SBOM license downloader."""
import json
import os
from dataclasses import dataclass
from dataclasses import field
from dataclasses import fields
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_FILE = 'sbom-licenses.json'


@dataclass
class GitHubConfig:
    token: str | None = field(
        default_factory=lambda: os.getenv('GITHUB_TOKEN'),
    )
    api_base_url: str = 'https://api.github.com'
    user_agent: str = 'SBOM-License-Downloader/1.0'

    def __repr__(self) -> str:
        return (
            f"GitHubConfig(token='*****', api_base_url={self.api_base_url!r}, "
            f"user_agent={self.user_agent!r})"
        )


@dataclass
class HttpConfig:
    """Settings for the shared cached HTTP session."""
    cache_name: str = '.requests-cache/licenses.sqlite3'
    expire_after: int = 60 * 60 * 24  # 1 day in seconds
    pool_size: int = 16


@dataclass
class LicenseDownloaderConfig:
    sbom_path: str = './sbom.json'
    output_directory: str = './licenses'
    create_output_directory: bool = True
    overwrite_existing_files: bool = False
    default_file_extension: str = '.txt'
    # Wildcard patterns such as "Microsoft.*" or "System.?"
    excluded_package_patterns: list[str] = field(default_factory=list)
    workers: int = 8
    timeout: int = 30
    use_github_api: bool = True

    github: GitHubConfig = field(default_factory=GitHubConfig)
    http: HttpConfig = field(default_factory=HttpConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'LicenseDownloaderConfig':
        """Build a config from a JSON-like dict, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

        values = dict(data)
        github = values.pop('github', None) or {}
        http = values.pop('http', None) or {}
        try:
            config = cls(**values)
            config.github = GitHubConfig(**github)
            config.http = HttpConfig(**http)
        except TypeError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

        # An explicit empty token in the file still falls back to the env
        if not config.github.token:
            config.github.token = os.getenv('GITHUB_TOKEN')
        return config

    @classmethod
    def load(cls, path: str | Path | None = None) -> 'LicenseDownloaderConfig':
        """
        Load configuration from a JSON file.

        A missing default file is not an error; a missing explicitly
        requested file is.
        """
        config_path = Path(path) if path else Path(DEFAULT_CONFIG_FILE)
        if not config_path.exists():
            if path:
                raise ValueError(f"Config file not found: {config_path}")
            return cls()

        try:
            with open(config_path, encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a JSON object: {config_path}")
        return cls.from_dict(data)
