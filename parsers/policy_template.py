"""
Downloadable CSV template for bulk policy uploads.

Keeps agents' spreadsheets aligned with POLICY_COLUMN_MAPPING: the header
row is the mapping's CSV side in order, followed by a row marking each
column required or optional, followed by one example policy.
"""

from datetime import date
from typing import Optional

from parsers.policy_row_mapper import POLICY_COLUMN_MAPPING, REQUIRED_HEADERS

EXAMPLE_VALUES: dict[str, str] = {
    "Policyholder Name": '"John Doe"',
    "Contact No": '"9876543210"',
    "Email ID": '"john@example.com"',
    "Policy Type": '"General"',
    "Policy Number": '"POL123456"',
    "Insurance Company": '"ICICI Lombard"',
    "Product Type": '"Two Wheeler"',
    "Policy Start Date": '"01-01-2024"',
    "Policy End Date": '"31-12-2024"',
    "Premium Amount": "5000",
    "Net Premium": "4500",
    "GST": "500",
    "Total Premium": "5000",
    "Commission Percentage": "10",
    "Commission Amount": "500",
    "Business Type": '"New"',
    "Registration No": '"ABC1234"',
}


def generate_csv_template() -> str:
    """
    Build the template text.

    Returns:
        Three lines joined by "\\n": headers, [REQUIRED]/[Optional]
        markers, and an example row
    """
    headers = list(POLICY_COLUMN_MAPPING)

    header_row = ",".join(f'"{header}"' for header in headers)
    info_row = ",".join(
        '"[REQUIRED]"' if header in REQUIRED_HEADERS else '"[Optional]"'
        for header in headers
    )
    example_row = ",".join(EXAMPLE_VALUES.get(header, '""') for header in headers)

    return f"{header_row}\n{info_row}\n{example_row}"


def template_filename(today: Optional[date] = None) -> str:
    """Download name, e.g. policies_template_2024-01-31.csv"""
    today = today or date.today()
    return f"policies_template_{today.isoformat()}.csv"
