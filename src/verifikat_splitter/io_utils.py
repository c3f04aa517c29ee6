"""
I/O utilities for reading verification lists and handling output paths.
"""

import re
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple

import pandas as pd

from .config import INPUT_DELIMITER
from .models import InputFormatError, Row

QUOTE = '"'


def read_verification_list(path: Path, encoding: str = "utf-8-sig") -> List[Row]:
    """
    Read a semicolon separated verification list into rows.

    Quoting is permissive: a quote inside an unquoted field is literal text,
    and inside a quoted field any quote that is not doubled and not followed
    by a separator or the end of the line is kept where it stands. Blank lines
    are skipped and a byte order mark is dropped.

    Args:
        path: Path to the CSV file
        encoding: Text encoding of the file

    Returns:
        All rows in file order

    Raises:
        InputFormatError: If the file cannot be read or a row does not have 8 fields
    """
    if not path.exists():
        raise InputFormatError(f"File not found: {path}")

    rows = []
    try:
        with open(path, "r", encoding=encoding, newline="") as f:
            for line_number, values in split_records(f):
                rows.append(Row.from_fields(values, line_number=line_number))
    except (OSError, UnicodeDecodeError) as e:
        raise InputFormatError(f"Failed to read verification list {path}: {e}")

    return rows


def split_records(lines: Iterable[str], delimiter: str = INPUT_DELIMITER) -> Iterator[Tuple[int, List[str]]]:
    """
    Split text lines into records.

    Yields:
        Tuples of (1-based line number where the record starts, field values)
    """
    numbered = enumerate(lines, start=1)
    for line_number, raw in numbered:
        line = raw.rstrip("\r\n")
        if not line:
            continue

        start_line = line_number
        fields = []
        pos = 0
        while True:
            if line.startswith(QUOTE, pos):
                value, line, pos = _read_quoted(line, pos + 1, numbered, delimiter)
            else:
                end = line.find(delimiter, pos)
                if end < 0:
                    end = len(line)
                value, pos = line[pos:end], end
            fields.append(value)

            if pos >= len(line):
                break
            # Positioned on a separator
            pos += len(delimiter)

        yield start_line, fields


def _read_quoted(line: str, pos: int, numbered, delimiter: str) -> Tuple[str, str, int]:
    """
    Read a quoted field starting just after its opening quote.

    A quoted field may run over several lines. Returns the value, the line the
    field ended on and the position just after the closing quote.
    """
    chunks = []
    while True:
        quote = line.find(QUOTE, pos)
        if quote < 0:
            chunks.append(line[pos:])
            following = next(numbered, None)
            if following is None:
                # Unterminated at end of file
                return "".join(chunks), line, len(line)
            chunks.append("\n")
            line, pos = following[1].rstrip("\r\n"), 0
            continue

        chunks.append(line[pos:quote])
        pos = quote + 1
        if line.startswith(QUOTE, pos):
            chunks.append(QUOTE)
            pos += 1
        elif pos == len(line) or line.startswith(delimiter, pos):
            return "".join(chunks), line, pos
        else:
            chunks.append(QUOTE)


def sanitize_filename(text: str) -> str:
    """
    Sanitize text for use as a file or folder name.

    Args:
        text: Text to sanitize

    Returns:
        Sanitized filename-safe text
    """
    if not text or not text.strip():
        return "Unknown"

    # Invalid chars: < > : " | ? * \ /
    sanitized = re.sub(r'[<>:"|?*\\/]', '_', text.strip())

    # Remove leading/trailing spaces, and dots at the end (problematic on Windows)
    sanitized = sanitized.strip(' ').rstrip('.')

    if len(sanitized) > 200:
        sanitized = sanitized[:200].strip()

    if not sanitized or sanitized in ('.', '..'):
        return "Unknown"

    return sanitized


def ensure_out_dir(path: Path) -> Path:
    """
    Ensure output directory exists.

    Args:
        path: Directory path to create

    Returns:
        The created directory path
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_manifest_csv(manifest_data: list[dict], output_path: Path) -> None:
    """
    Write manifest data to CSV file.

    Args:
        manifest_data: List of dictionaries with manifest information
        output_path: Path where to write the CSV file
    """
    if not manifest_data:
        return

    ensure_out_dir(output_path.parent)
    df = pd.DataFrame(manifest_data)
    df.to_csv(output_path, index=False, encoding='utf-8')
