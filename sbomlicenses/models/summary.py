from dataclasses import dataclass
from dataclasses import field

_SIZE_UNITS = ('B', 'KB', 'MB', 'GB')


def format_bytes(size: int) -> str:
    """Format a byte count with up to two decimals, e.g. ``1.5 KB``."""
    value = float(size)
    order = 0
    while value >= 1024 and order < len(_SIZE_UNITS) - 1:
        value /= 1024
        order += 1
    text = f"{value:.2f}".rstrip('0').rstrip('.')
    return f"{text} {_SIZE_UNITS[order]}"


@dataclass
class FileStats:
    total_files: int = 0
    total_size_bytes: int = 0
    output_directory: str = ''

    @property
    def size_formatted(self) -> str:
        return format_bytes(self.total_size_bytes)


@dataclass
class RunSummary:
    sbom_path: str = ''
    total_components: int = 0
    excluded_packages: int = 0
    successful_downloads: int = 0
    failed_downloads: int = 0
    failed_components: list[str] = field(default_factory=list)
    fatal_error: str | None = None
    total_files_created: int = 0
    total_size_bytes: int = 0
    output_directory: str = ''

    @property
    def has_errors(self) -> bool:
        return self.failed_downloads > 0 or self.fatal_error is not None

    @property
    def eligible_components(self) -> int:
        return self.total_components - self.excluded_packages

    @property
    def size_formatted(self) -> str:
        return format_bytes(self.total_size_bytes)
