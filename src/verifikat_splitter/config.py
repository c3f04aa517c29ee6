"""
Static configuration: default result unit, destination folders and formats.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from .models import ConfigurationError

# Hard coded for Automation och Mekatronik
DEFAULT_RESULT_UNIT = "Ztyret"

DESTINATION_MAP: Dict[str, str] = {
    "IntrezzeK": "Ztyret",
    "Revisorer": "Ztyret",
    "VB": "Ztyret",
    "ZKK": "Ztyret",
    "Zpel": "Ztyret",
    "Ztyret": "Ztyret",
    "ZÅG": "Ztyret",
    "WebGroup": "Ztyret",
}

DEFAULT_FILENAME = "13. Verifikatlista"
DEFAULT_FORMAT = "xlsx"
SUPPORTED_FORMATS = ("xlsx", "csv")
OUTPUT_DIR_SUFFIX = "-split"
INPUT_DELIMITER = ";"


@dataclass
class SplitConfig:
    """
    Settings for a single split run.

    Units listed in ``destination_map`` are written as ``<folder>/<unit>.<ext>``
    so several units can share one folder. Any other unit gets a folder of its
    own containing ``<default_filename>.<ext>``.
    """

    default_unit: str = DEFAULT_RESULT_UNIT
    destination_map: Dict[str, str] = field(default_factory=lambda: dict(DESTINATION_MAP))
    default_filename: str = DEFAULT_FILENAME
    output_format: str = DEFAULT_FORMAT

    def __post_init__(self):
        validate_format(self.output_format)
        if not self.default_unit or not self.default_unit.strip():
            raise ConfigurationError("Default result unit name must not be empty")

    def destination_for(self, unit_name: str) -> Optional[str]:
        return self.destination_map.get(unit_name)


def validate_format(output_format: str) -> str:
    """
    Check that an output format is supported.

    Raises:
        ConfigurationError: If the format is not one of SUPPORTED_FORMATS
    """
    if output_format not in SUPPORTED_FORMATS:
        raise ConfigurationError(
            f"Invalid output format specified {output_format}. "
            f"Only {' and '.join(SUPPORTED_FORMATS)} are supported"
        )
    return output_format


def parse_merge_options(values: Optional[Iterable[str]]) -> Dict[str, str]:
    """
    Parse ``UNIT=FOLDER`` pairs given on the command line.

    Args:
        values: Raw option values

    Returns:
        Mapping from unit name to folder name

    Raises:
        ConfigurationError: If a value is not of the form UNIT=FOLDER
    """
    mapping: Dict[str, str] = {}
    for raw in values or []:
        unit, sep, folder = raw.partition("=")
        unit, folder = unit.strip(), folder.strip()
        if not sep or not unit or not folder:
            raise ConfigurationError(f"Invalid merge mapping '{raw}', expected UNIT=FOLDER")
        mapping[unit] = folder
    return mapping


def build_config(
    output_format: str = DEFAULT_FORMAT,
    default_unit: Optional[str] = None,
    merges: Optional[Iterable[str]] = None,
) -> SplitConfig:
    """Build a SplitConfig from the built-in defaults plus command-line overrides."""
    destination_map = dict(DESTINATION_MAP)
    destination_map.update(parse_merge_options(merges))
    return SplitConfig(
        default_unit=default_unit or DEFAULT_RESULT_UNIT,
        destination_map=destination_map,
        output_format=output_format,
    )
