"""
CSV parser for bulk policy uploads.

Turns the text of an uploaded CSV into header-keyed rows. The dialect is
deliberately small and matches the files agents have been uploading:

    - `\\n` line breaks (a trailing `\\r` is removed by the per-line trim)
    - comma delimiter, commas inside double quotes do not split
    - a `"` only toggles quoting; doubled quotes (`""`) are not escapes
    - an unterminated quote swallows the rest of its line into one field
    - blank lines are ignored

Anything structurally unusable (no header, no data rows) raises
CSVFormatError and aborts the whole upload.
"""

import re
import structlog

from exceptions import CSVFormatError

logger = structlog.get_logger(__name__)

RawRow = dict[str, str]

_ENCLOSING_QUOTES = re.compile(r'^"|"$')


def _clean_field(value: str) -> str:
    """Trim and drop at most one leading and one trailing double quote."""
    return _ENCLOSING_QUOTES.sub("", value.strip())


def split_csv_line(line: str) -> list[str]:
    """
    Split one line into fields using the quote-toggle rule.

    Example:
        '"Doe, John",POL1,General' -> ['Doe, John', 'POL1', 'General']
    """
    values: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            values.append(_clean_field("".join(current)))
            current = []
        else:
            current.append(char)

    values.append(_clean_field("".join(current)))
    return values


def parse_policy_csv(text: str) -> list[RawRow]:
    """
    Parse CSV text into an ordered list of rows keyed by header.

    Args:
        text: Full file contents

    Returns:
        One dict per non-blank data line. Every dict has exactly one key
        per header, in header order; missing trailing cells are "".

    Raises:
        CSVFormatError: Fewer than two lines (header plus one data row)
    """
    lines = text.strip().split("\n")
    if len(lines) < 2:
        raise CSVFormatError(
            message="CSV must have header row and at least one data row",
            details={"line_count": len(lines) if text.strip() else 0}
        )

    headers = split_csv_line(lines[0].strip())

    rows: list[RawRow] = []
    for raw_line in lines[1:]:
        line = raw_line.strip()
        if not line:
            continue

        values = split_csv_line(line)
        rows.append({
            header: values[index] if index < len(values) else ""
            for index, header in enumerate(headers)
        })

    logger.debug(
        "policy_csv_parsed",
        header_count=len(headers),
        row_count=len(rows)
    )

    return rows


def read_upload_text(content: bytes) -> str:
    """
    Decode uploaded bytes as UTF-8, dropping a byte order mark if present.

    Spreadsheet tools commonly prepend a BOM, which would otherwise end up
    glued to the first header name.

    Raises:
        CSVFormatError: Content is not valid UTF-8
    """
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.warning("csv_decode_failed", error=str(e))
        raise CSVFormatError(
            message="Failed to read file",
            details={"original_error": str(e)}
        )
