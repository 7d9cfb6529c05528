"""
Bulk upload parsers module.

CSV text -> rows -> mapped records -> validated PolicyCreate objects.
"""

from parsers.policy_csv_parser import (
    parse_policy_csv,
    read_upload_text,
    split_csv_line,
)
from parsers.policy_row_mapper import (
    POLICY_COLUMN_MAPPING,
    REQUIRED_FIELDS,
    ValidationOutcome,
    map_row,
    normalize_date,
    validate_policy_record,
    build_policy_create,
)
from parsers.policy_template import (
    generate_csv_template,
    template_filename,
)

__all__ = [
    "parse_policy_csv",
    "read_upload_text",
    "split_csv_line",
    "POLICY_COLUMN_MAPPING",
    "REQUIRED_FIELDS",
    "ValidationOutcome",
    "map_row",
    "normalize_date",
    "validate_policy_record",
    "build_policy_create",
    "generate_csv_template",
    "template_filename",
]
