"""
Unit tests for bulk upload row mapping, validation and PolicyCreate building.

Run: pytest tests/unit/test_policy_row_mapper.py -v
"""

import pytest

from parsers.policy_row_mapper import (
    POLICY_COLUMN_MAPPING,
    REQUIRED_FIELDS,
    REQUIRED_HEADERS,
    build_policy_create,
    map_row,
    normalize_date,
    parse_bool,
    parse_number,
    validate_policy_record,
)
from models.policy import PolicyStatus, RepeatReminder


def valid_record(**overrides) -> dict:
    record = {
        "policyholder_name": "John Doe",
        "policy_number": "POL123456",
        "insurance_company": "ICICI Lombard",
        "policy_type": "General",
        "policy_start_date": "2024-01-01",
        "policy_end_date": "2024-12-31",
    }
    record.update(overrides)
    return record


class TestNormalizeDate:
    """Tests for normalize_date()"""

    @pytest.mark.parametrize("value,expected", [
        ("01-01-2024", "2024-01-01"),
        ("31/12/2024", "2024-12-31"),
        ("1-2-2024", "2024-02-01"),
        ("5/11/2023", "2023-11-05"),
        ("2024-01-05", "2024-01-05"),
        ("2024/1/5", "2024-01-05"),
        (" 15-08-2024 ", "2024-08-15"),
    ])
    def test_accepted_layouts(self, value, expected):
        assert normalize_date(value) == expected

    def test_month_length_is_not_checked(self):
        """Only 1-31 is enforced for the day."""
        assert normalize_date("31-02-2024") == "2024-02-31"

    @pytest.mark.parametrize("value", [
        "",
        "   ",
        None,
        "13-13-2024",   # month 13
        "32-01-2024",   # day 32
        "00-01-2024",   # day 0
        "2024-13-01",
        "01-01-24",     # no four-digit year
        "2024-01",
        "01.01.2024",
        "aa-bb-2024",
        "2024-01-01-01",
    ])
    def test_rejected_values(self, value):
        assert normalize_date(value) is None


class TestCoercion:
    """Tests for parse_number() and parse_bool()"""

    @pytest.mark.parametrize("value,expected", [
        ("5000", 5000.0),
        ("12.5", 12.5),
        ("-3", -3.0),
        ("0", 0.0),
        (".5", 0.5),
        ("+2e3", 2000.0),
    ])
    def test_parse_number(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("12abc", 12.0),
        ("5000 INR", 5000.0),
        ("18%", 18.0),
        ("1,000", 1.0),
        ("1_000", 1.0),
        ("12.5.3", 12.5),
    ])
    def test_parse_number_reads_leading_number(self, value, expected):
        """Trailing text after the number is ignored."""
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value", ["abc", "INR 5000", "inf", "nan", "-", ".", "", "1e999"])
    def test_parse_number_rejects(self, value):
        assert parse_number(value) is None

    @pytest.mark.parametrize("value", ["yes", "YES", "True", "1", " yes "])
    def test_parse_bool_true(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["no", "false", "0", "y", "maybe"])
    def test_parse_bool_false(self, value):
        assert parse_bool(value) is False


class TestMapRow:
    """Tests for map_row()"""

    def test_maps_headers_to_fields(self):
        # Arrange
        row = {
            "Policyholder Name": "  John Doe ",
            "Policy Number": "POL1",
            "Policy Start Date": "01-01-2024",
            "Premium Amount": " 5000 ",
            "One Time Policy": "Yes",
        }

        # Act
        record = map_row(row)

        # Assert
        assert record == {
            "policyholder_name": "John Doe",
            "policy_number": "POL1",
            "policy_start_date": "2024-01-01",
            "premium_amount": 5000.0,
            "is_one_time_policy": True,
        }

    def test_blank_and_absent_cells_leave_field_unset(self):
        """Unset is distinguishable from empty: the key is simply missing."""
        record = map_row({"Policyholder Name": "", "Remark": "   ", "Policy Number": "POL1"})

        assert "policyholder_name" not in record
        assert "remark" not in record
        assert "email_id" not in record

    def test_unparseable_number_keeps_trimmed_text(self):
        record = map_row({"GST": " N/A ", "Net Premium": "4500"})

        assert record["gst"] == "N/A"
        assert record["net_premium"] == 4500.0

    def test_number_with_unit_keeps_leading_number(self):
        record = map_row({"Premium Amount": "5000 INR", "GST": " 18% "})

        assert record["premium_amount"] == 5000.0
        assert record["gst"] == 18.0

    def test_unparseable_date_is_dropped(self):
        record = map_row({"Policy Start Date": "next monday", "Policy End Date": "31-12-2024"})

        assert "policy_start_date" not in record
        assert record["policy_end_date"] == "2024-12-31"

    def test_unknown_headers_are_ignored(self):
        record = map_row({"Favourite Colour": "Blue", "Policy Number": "POL1"})

        assert record == {"policy_number": "POL1"}

    def test_one_time_policy_false(self):
        assert map_row({"One Time Policy": "no"})["is_one_time_policy"] is False

    def test_mapping_covers_required_fields(self):
        fields = set(POLICY_COLUMN_MAPPING.values())
        assert all(name in fields for name, _ in REQUIRED_FIELDS)
        assert len(REQUIRED_HEADERS) == len(REQUIRED_FIELDS)


class TestValidatePolicyRecord:
    """Tests for validate_policy_record()"""

    def test_complete_record_is_valid(self):
        outcome = validate_policy_record(valid_record())

        assert outcome.valid
        assert outcome.errors == ()
        assert outcome.message() == ""

    def test_empty_record_reports_all_errors_in_order(self):
        outcome = validate_policy_record({})

        assert not outcome.valid
        assert list(outcome.errors) == [
            "Policyholder name is required",
            "Policy number is required",
            "Insurance company is required",
            "Policy type is required",
            "Policy start date is required",
            "Policy end date is required",
        ]

    def test_message_joins_errors(self):
        record = valid_record()
        del record["policy_number"]
        del record["policy_type"]

        outcome = validate_policy_record(record)

        assert outcome.message() == "Policy number is required; Policy type is required"

    def test_blank_value_counts_as_missing(self):
        outcome = validate_policy_record(valid_record(policyholder_name="  "))

        assert outcome.errors == ("Policyholder name is required",)

    def test_bad_date_surfaces_as_missing(self):
        """An unparseable date was dropped by the mapper."""
        record = map_row({
            "Policyholder Name": "John",
            "Policy Number": "POL1",
            "Insurance Company": "ICICI Lombard",
            "Policy Type": "General",
            "Policy Start Date": "2024-13-01",
            "Policy End Date": "31-12-2024",
        })

        outcome = validate_policy_record(record)

        assert outcome.errors == ("Policy start date is required",)

    def test_start_after_end_is_not_rejected(self):
        outcome = validate_policy_record(
            valid_record(policy_start_date="2025-01-01", policy_end_date="2024-01-01")
        )

        assert outcome.valid


class TestBuildPolicyCreate:
    """Tests for build_policy_create()"""

    def test_defaults(self):
        policy = build_policy_create(valid_record())

        assert policy.status == PolicyStatus.ACTIVE
        assert policy.business_type == "New"
        assert policy.is_one_time_policy is False
        assert policy.repeat_reminder == RepeatReminder.NONE
        assert policy.premium_amount is None
        assert policy.documents == []

    def test_numbers_rendered_as_typed(self):
        policy = build_policy_create(valid_record(
            premium_amount=5000.0,
            net_premium=4500.0,
            gst=12.5,
            commission_percentage=10.0,
        ))

        assert policy.premium_amount == 5000.0
        assert policy.net_premium == "4500"
        assert policy.gst == "12.5"
        assert policy.commission_percentage == "10"

    def test_text_premium_amount_is_dropped(self):
        policy = build_policy_create(valid_record(premium_amount="five thousand"))

        assert policy.premium_amount is None

    def test_unparsed_money_text_is_kept(self):
        policy = build_policy_create(valid_record(gst="18%"))

        assert policy.gst == "18%"

    @pytest.mark.parametrize("value,expected", [
        ("Monthly", RepeatReminder.MONTHLY),
        ("Half-yearly", RepeatReminder.HALF_YEARLY),
        ("Weekly", RepeatReminder.NONE),
        (12.0, RepeatReminder.NONE),
    ])
    def test_repeat_reminder(self, value, expected):
        policy = build_policy_create(valid_record(repeat_reminder=value))

        assert policy.repeat_reminder == expected

    def test_business_type_and_one_time_flag_carried(self):
        policy = build_policy_create(valid_record(business_type="Renewal", is_one_time_policy=True))

        assert policy.business_type == "Renewal"
        assert policy.is_one_time_policy is True
