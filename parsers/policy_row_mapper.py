"""
Row mapping and validation for bulk policy uploads.

Each parsed CSV row goes through three steps:

    map_row()                 CSV headers -> policy fields, with coercion
    validate_policy_record()  required-field checks
    build_policy_create()     defaults and enum clean-up -> PolicyCreate

Mapping never raises for bad cell contents. A date that cannot be
normalized is simply left out (validation then reports it if required),
and a number that cannot be parsed is kept as the original text so the
agent can see what was typed.
"""

from dataclasses import dataclass
import math
import re
from typing import Any, Optional, Union
import structlog

from models.policy import PolicyCreate, PolicyStatus, RepeatReminder

logger = structlog.get_logger(__name__)

MappedValue = Union[str, float, bool]
MappedRecord = dict[str, MappedValue]


# ===================
# COLUMN MAPPING
# ===================

# CSV header -> policy field. Order is also the template column order.
POLICY_COLUMN_MAPPING: dict[str, str] = {
    "Policyholder Name": "policyholder_name",
    "Contact No": "contact_no",
    "Email ID": "email_id",
    "Policy Type": "policy_type",  # General, Life, etc.
    "Policy Number": "policy_number",
    "Insurance Company": "insurance_company",
    "Product Type": "product_type",
    "Policy Start Date": "policy_start_date",  # DD-MM-YYYY or YYYY-MM-DD
    "Policy End Date": "policy_end_date",
    "Premium Amount": "premium_amount",
    "Net Premium": "net_premium",
    "OD Premium": "od_premium",
    "Third Party Premium": "third_party_premium",
    "GST": "gst",
    "Total Premium": "total_premium",
    "Registration No": "registration_no",
    "Engine No": "engine_no",
    "Chasis No": "chasis_no",
    "HP": "hp",
    "Risk Location Address": "risk_location_address",
    "IDV": "idv",
    "Commission Percentage": "commission_percentage",
    "Commission Amount": "commission_amount",
    "Sub Agent ID": "sub_agent_id",
    "Sub Agent Commission %": "sub_agent_commission_percentage",
    "Sub Agent Commission Amount": "sub_agent_commission_amount",
    "NCB Percentage": "ncb_percentage",
    "Business Type": "business_type",
    "Member Of": "member_of",
    "Remark": "remark",
    "Reference From Name": "reference_from_name",
    "Address": "address",
    "Payment Frequency": "payment_frequency",
    "Nominee Name": "nominee_name",
    "Nominee Relationship": "nominee_relationship",
    "Repeat Reminder": "repeat_reminder",
    "One Time Policy": "is_one_time_policy",
}

DATE_FIELDS = frozenset({"policy_start_date", "policy_end_date"})

NUMERIC_FIELDS = frozenset({
    "premium_amount",
    "net_premium",
    "od_premium",
    "third_party_premium",
    "gst",
    "total_premium",
    "commission_percentage",
    "commission_amount",
    "sub_agent_commission_percentage",
    "sub_agent_commission_amount",
    "ncb_percentage",
    "idv",
    "hp",
})

BOOLEAN_FIELDS = frozenset({"is_one_time_policy"})

_TRUTHY = frozenset({"yes", "true", "1"})

# (field, message) in the order errors are reported
REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("policyholder_name", "Policyholder name is required"),
    ("policy_number", "Policy number is required"),
    ("insurance_company", "Insurance company is required"),
    ("policy_type", "Policy type is required"),
    ("policy_start_date", "Policy start date is required"),
    ("policy_end_date", "Policy end date is required"),
)

REQUIRED_HEADERS = frozenset(
    header
    for header, field_name in POLICY_COLUMN_MAPPING.items()
    if field_name in {name for name, _ in REQUIRED_FIELDS}
)

_DATE_SEPARATORS = re.compile(r"[-/]")
_DIGITS = re.compile(r"[0-9]+")
_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


# ===================
# COERCION
# ===================

def normalize_date(value: Optional[str]) -> Optional[str]:
    """
    Normalize a date string to YYYY-MM-DD.

    Accepted layouts, first match wins:
        DD-MM-YYYY  (also D-M-YYYY: any layout whose last part has 4 chars)
        YYYY-MM-DD  (first part has 4 chars)
    `-` and `/` are interchangeable. Month must be 1-12 and day 1-31;
    month lengths and leap years are not checked.

    Examples:
        "01-01-2024" -> "2024-01-01"
        "2024/1/5"   -> "2024-01-05"
        "13-45-2024" -> None (month 45)

    Returns:
        Normalized string, or None if the value is not a recognizable date
    """
    if not value:
        return None

    value = value.strip()
    if not value:
        return None

    parts = _DATE_SEPARATORS.split(value)
    if len(parts) != 3:
        return None

    if len(parts[2]) == 4:
        day, month, year = parts
    elif len(parts[0]) == 4:
        year, month, day = parts
    else:
        return None

    if not all(_DIGITS.fullmatch(part) for part in (year, month, day)):
        return None

    month_num = int(month)
    day_num = int(day)
    if not 1 <= month_num <= 12 or not 1 <= day_num <= 31:
        return None

    return f"{year}-{month_num:02d}-{day_num:02d}"


def parse_number(value: str) -> Optional[float]:
    """
    Read the leading number of a cell: "5000 INR" -> 5000.0, "18%" -> 18.0.

    None when the text does not start with a number or the number is
    not finite.
    """
    match = _LEADING_NUMBER.match(value)
    if not match:
        return None
    number = float(match.group(0))
    if not math.isfinite(number):
        return None
    return number


def parse_bool(value: str) -> bool:
    """Yes / true / 1 (any case) are true, everything else false."""
    return value.strip().lower() in _TRUTHY


def map_row(row: dict[str, str]) -> MappedRecord:
    """
    Map one CSV row to policy fields.

    Only headers in POLICY_COLUMN_MAPPING are read. A field is set only
    when its cell exists and is non-blank, so callers can tell "not
    provided" apart from an explicit value.

    Args:
        row: Header-keyed cells from the CSV parser

    Returns:
        Dict of field name -> str / float / bool
    """
    mapped: MappedRecord = {}

    for csv_header, field_name in POLICY_COLUMN_MAPPING.items():
        value = row.get(csv_header)
        if value is None or not value.strip():
            continue

        trimmed = value.strip()

        if field_name in DATE_FIELDS:
            normalized = normalize_date(trimmed)
            if normalized:
                mapped[field_name] = normalized
            continue

        if field_name in NUMERIC_FIELDS:
            number = parse_number(trimmed)
            # Keep the raw text so the failure report shows what was typed
            mapped[field_name] = number if number is not None else trimmed
            continue

        if field_name in BOOLEAN_FIELDS:
            mapped[field_name] = parse_bool(trimmed)
            continue

        mapped[field_name] = trimmed

    return mapped


# ===================
# VALIDATION
# ===================

@dataclass(frozen=True)
class ValidationOutcome:
    """Result of validating one mapped record."""
    errors: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors

    def message(self) -> str:
        """Errors joined for a single failure line."""
        return "; ".join(self.errors)


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def validate_policy_record(record: MappedRecord) -> ValidationOutcome:
    """
    Check the fields every policy must have.

    Dates are checked after normalization, so an unparseable date shows up
    here as missing. Start and end dates are not compared.
    """
    errors = tuple(
        message
        for field_name, message in REQUIRED_FIELDS
        if _is_blank(record.get(field_name))
    )
    return ValidationOutcome(errors=errors)


# ===================
# DOMAIN RECORD
# ===================

def _as_text(value: Optional[MappedValue]) -> Optional[str]:
    """Render a mapped number the way it was typed: 4500.0 -> "4500"."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    return value or None


def _repeat_reminder(value: Optional[MappedValue]) -> RepeatReminder:
    try:
        return RepeatReminder(value if isinstance(value, str) else "")
    except ValueError:
        return RepeatReminder.NONE


def build_policy_create(record: MappedRecord) -> PolicyCreate:
    """
    Build the policy to insert from a validated record.

    Defaults: status "active", business type "New", policy type "General".
    An unrecognized repeat reminder becomes blank. premium_amount is only
    kept when it parsed as a number; the other money and percentage
    columns are stored as text.
    """
    premium_amount = record.get("premium_amount")

    return PolicyCreate(
        policyholder_name=str(record["policyholder_name"]),
        policy_number=str(record["policy_number"]),
        insurance_company=str(record["insurance_company"]),
        policy_type=str(record.get("policy_type") or "General"),
        policy_start_date=str(record["policy_start_date"]),
        policy_end_date=str(record["policy_end_date"]),
        contact_no=_as_text(record.get("contact_no")),
        email_id=_as_text(record.get("email_id")),
        address=_as_text(record.get("address")),
        product_type=_as_text(record.get("product_type")),
        business_type=_as_text(record.get("business_type")) or "New",
        member_of=_as_text(record.get("member_of")),
        reference_from_name=_as_text(record.get("reference_from_name")),
        status=PolicyStatus.ACTIVE,
        premium_amount=premium_amount if isinstance(premium_amount, float) else None,
        payment_frequency=_as_text(record.get("payment_frequency")),
        net_premium=_as_text(record.get("net_premium")),
        od_premium=_as_text(record.get("od_premium")),
        third_party_premium=_as_text(record.get("third_party_premium")),
        gst=_as_text(record.get("gst")),
        total_premium=_as_text(record.get("total_premium")),
        ncb_percentage=_as_text(record.get("ncb_percentage")),
        registration_no=_as_text(record.get("registration_no")),
        engine_no=_as_text(record.get("engine_no")),
        chasis_no=_as_text(record.get("chasis_no")),
        hp=_as_text(record.get("hp")),
        idv=_as_text(record.get("idv")),
        risk_location_address=_as_text(record.get("risk_location_address")),
        commission_percentage=_as_text(record.get("commission_percentage")),
        commission_amount=_as_text(record.get("commission_amount")),
        sub_agent_id=_as_text(record.get("sub_agent_id")),
        sub_agent_commission_percentage=_as_text(record.get("sub_agent_commission_percentage")),
        sub_agent_commission_amount=_as_text(record.get("sub_agent_commission_amount")),
        nominee_name=_as_text(record.get("nominee_name")),
        nominee_relationship=_as_text(record.get("nominee_relationship")),
        remark=_as_text(record.get("remark")),
        is_one_time_policy=record.get("is_one_time_policy") is True,
        repeat_reminder=_repeat_reminder(record.get("repeat_reminder")),
        documents=[],
    )
