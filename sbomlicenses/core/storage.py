import re
from pathlib import Path

import structlog

from sbomlicenses.models.license import LicenseDownloadResult
from sbomlicenses.models.summary import FileStats

logger = structlog.get_logger('storage')

# Characters rejected by at least one common filesystem, plus ASCII controls
_INVALID_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def sanitize_file_name(value: str) -> str:
    return _INVALID_CHARS.sub('_', value).strip('. ')


class LicenseStorage:
    """Writes license files as ``{name}-{version}{extension}`` into one directory."""

    def __init__(
        self,
        output_directory: str | Path,
        default_extension: str = '.txt',
        create_directory: bool = True,
        overwrite: bool = False,
    ):
        self.output_directory = Path(output_directory)
        if default_extension and not default_extension.startswith('.'):
            default_extension = '.' + default_extension
        self.default_extension = default_extension
        self.create_directory = create_directory
        self.overwrite = overwrite

    def file_extension(self, file_name: str | None) -> str:
        if not file_name:
            return self.default_extension
        return Path(file_name).suffix or self.default_extension

    def build_file_name(self, name: str, version: str, original_file_name: str | None = None) -> str:
        return (
            f"{sanitize_file_name(name)}-{sanitize_file_name(version)}"
            f"{self.file_extension(original_file_name)}"
        )

    def save(self, result: LicenseDownloadResult) -> Path | None:
        """
        Save a downloaded license.

        Returns the file path, or None when there is nothing to save or the
        write failed. An existing file is kept unless overwrite is enabled.
        """
        if not result.success or not result.content:
            logger.warning(
                'Cannot save license - download was not successful',
                component=result.component.name,
            )
            return None

        component = result.component
        file_path = self.output_directory / self.build_file_name(
            component.name, component.version, result.original_file_name,
        )

        try:
            if self.create_directory:
                self.output_directory.mkdir(parents=True, exist_ok=True)

            if file_path.exists() and not self.overwrite:
                logger.info('License file already exists, skipping', path=str(file_path))
                return file_path

            file_path.write_bytes(result.content)
        except OSError as e:
            logger.error(
                'Error saving license file',
                component=component.name, path=str(file_path), error=str(e),
            )
            return None

        logger.info(
            'Saved license file',
            path=str(file_path),
            size=len(result.content),
            source=result.source,
            spdx_id=result.spdx_id,
            license_name=result.license_name,
        )
        return file_path

    def stats(self) -> FileStats:
        if not self.output_directory.is_dir():
            return FileStats(output_directory=str(self.output_directory))

        files = [p for p in self.output_directory.iterdir() if p.is_file()]
        return FileStats(
            total_files=len(files),
            total_size_bytes=sum(p.stat().st_size for p in files),
            output_directory=str(self.output_directory),
        )
