"""SBOM file validation and format detection."""
import json
from enum import Enum
from pathlib import Path
from typing import Any


class SbomValidationError(Exception):
    """The SBOM file exists but cannot be used."""


class UnsupportedSbomFormatError(SbomValidationError):
    """The document is neither CycloneDX nor SPDX."""


class SbomFormat(str, Enum):
    CYCLONEDX = 'CycloneDX'
    SPDX = 'SPDX'


def load_sbom_document(sbom_path: Path) -> dict[str, Any]:
    """
    Read an SBOM file as a JSON object.

    Raises:
        FileNotFoundError if the file does not exist
        SbomValidationError if it is not a file, is empty or is not a JSON object
    """
    if not sbom_path.exists():
        raise FileNotFoundError(f"SBOM file not found: {sbom_path}")

    if not sbom_path.is_file():
        raise SbomValidationError(f"Not a file: {sbom_path}")

    if sbom_path.stat().st_size == 0:
        raise SbomValidationError(f"SBOM file is empty: {sbom_path}")

    try:
        with open(sbom_path, encoding='utf-8-sig') as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SbomValidationError(f"Invalid JSON in {sbom_path}: {e}") from e

    if not isinstance(data, dict):
        raise SbomValidationError(f"SBOM must be a JSON object: {sbom_path}")

    return data


def detect_sbom_format(document: dict[str, Any]) -> SbomFormat:
    """Identify the SBOM dialect from its top-level keys."""
    if 'bomFormat' in document:
        return SbomFormat.CYCLONEDX
    if 'spdxVersion' in document:
        return SbomFormat.SPDX
    raise UnsupportedSbomFormatError(
        'Unknown SBOM format. Supported formats: CycloneDX, SPDX',
    )
