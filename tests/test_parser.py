from datetime import date
from decimal import Decimal

import pytest
from conftest import csv_text

from spend_analysis import (
    AmountParseError,
    DateParseError,
    MalformedInputError,
    TransactionRecord,
    parse_transactions,
)
from spend_analysis.parser import parse_amount, parse_date, resolve_columns

HEADER_LINE = "Type,Trans Date,Post Date,Description,Amount\n"

OLD_FORMAT = csv_text(
    """
    Type,Trans Date,Post Date,Description,Amount
    Sale,01/02/2019,01/03/2019,STARBUCKS #123,-4.50
    Payment,01/05/2019,01/05/2019,Payment Thank You - Web,250.00
    Sale,01/07/2019,01/08/2019,"SAFEWAY, #1234",-62.18
    """
)


def test_parses_rows_in_file_order():
    records = parse_transactions(OLD_FORMAT)

    assert records == [
        TransactionRecord(
            transaction_type="Sale",
            transaction_date=date(2019, 1, 2),
            post_date=date(2019, 1, 3),
            description="STARBUCKS #123",
            amount=Decimal("-4.50"),
        ),
        TransactionRecord(
            transaction_type="Payment",
            transaction_date=date(2019, 1, 5),
            post_date=date(2019, 1, 5),
            description="Payment Thank You - Web",
            amount=Decimal("250.00"),
        ),
        TransactionRecord(
            transaction_type="Sale",
            transaction_date=date(2019, 1, 7),
            post_date=date(2019, 1, 8),
            description="SAFEWAY, #1234",
            amount=Decimal("-62.18"),
        ),
    ]


def test_record_count_matches_data_rows_without_filter(data_dir):
    text = (data_dir / "chase_2018_trans_date.csv").read_text(encoding="utf-8")
    n_rows = len(text.strip().splitlines()) - 1

    assert len(parse_transactions(text)) == n_rows


def test_exclude_type_drops_matching_rows(data_dir):
    text = (data_dir / "chase_2018_trans_date.csv").read_text(encoding="utf-8")
    all_records = parse_transactions(text)
    payments = sum(1 for r in all_records if r.transaction_type == "Payment")

    kept = parse_transactions(text, exclude_type="Payment")

    assert payments == 1
    assert len(kept) == len(all_records) - payments
    assert all(r.transaction_type != "Payment" for r in kept)


def test_newer_transaction_date_header_and_extra_columns(data_dir):
    text = (data_dir / "chase_2019_transaction_date.csv").read_text(encoding="utf-8")

    records = parse_transactions(text)

    assert [r.transaction_date for r in records] == [
        date(2019, 1, 15),
        date(2019, 1, 14),
        date(2019, 1, 12),
        date(2019, 1, 10),
    ]
    # Quoted field with an embedded comma survives intact.
    assert records[1].description == "UBER   *TRIP, HELP.UBER.COM"


def test_trans_date_preferred_when_both_spellings_present():
    text = csv_text(
        """
        Type,Transaction Date,Trans Date,Post Date,Description,Amount
        Sale,02/01/2019,03/01/2019,03/02/2019,X,-1
        """
    )

    (record,) = parse_transactions(text)

    assert record.transaction_date == date(2019, 3, 1)


def test_header_names_tolerate_bom_and_padding():
    text = "\ufeffType , Trans Date,Post Date,Description,Amount\nSale,01/02/2019,01/03/2019,X,-1\n"

    (record,) = parse_transactions(text)

    assert record.transaction_type == "Sale"


def test_blank_rows_are_skipped():
    text = OLD_FORMAT + ",,,,\n\n"

    assert len(parse_transactions(text)) == 3


def test_missing_amount_column_is_malformed():
    text = csv_text(
        """
        Type,Trans Date,Post Date,Description
        Sale,01/02/2019,01/03/2019,STARBUCKS #123
        """
    )

    with pytest.raises(MalformedInputError) as excinfo:
        parse_transactions(text)

    assert "Amount" in str(excinfo.value)


def test_missing_both_date_spellings_names_them():
    with pytest.raises(MalformedInputError) as excinfo:
        resolve_columns(["Type", "Date", "Post Date", "Description", "Amount"])

    assert "Trans Date or Transaction Date" in str(excinfo.value)


def test_empty_text_has_no_header():
    with pytest.raises(MalformedInputError):
        parse_transactions("")


def test_parse_date_accepts_mm_dd_yyyy():
    assert parse_date("01/15/2019") == date(2019, 1, 15)


@pytest.mark.parametrize(
    "raw",
    ["13/40/2019", "2019-01-15", "1/15/2019", "", "02/30/2019", "\uff10\uff11/15/2019"],
)
def test_parse_date_rejects_bad_values(raw):
    with pytest.raises(DateParseError):
        parse_date(raw)


@pytest.mark.parametrize(
    "raw",
    ["abc", "", "NaN", "Infinity", "$4.50", "1E+3", "1_000", "+4.50", "4.", "\u0664\u0665"],
)
def test_parse_amount_rejects_non_numeric(raw):
    with pytest.raises(AmountParseError):
        parse_amount(raw)


def test_parse_amount_keeps_exact_decimal():
    assert parse_amount(" -4.50 ") == Decimal("-4.50")


def test_bad_date_reports_row_and_column():
    text = csv_text(
        """
        Type,Trans Date,Post Date,Description,Amount
        Sale,01/02/2019,01/03/2019,OK,-1
        Sale,13/40/2019,01/03/2019,BAD,-1
        """
    )

    with pytest.raises(DateParseError) as excinfo:
        parse_transactions(text)

    assert excinfo.value.row == 2
    assert excinfo.value.column == "Trans Date"


def test_bad_amount_reports_row_and_column():
    text = csv_text(
        """
        Type,Trans Date,Post Date,Description,Amount
        Sale,01/02/2019,01/03/2019,BAD,four fifty
        """
    )

    with pytest.raises(AmountParseError) as excinfo:
        parse_transactions(text)

    assert excinfo.value.row == 1
    assert excinfo.value.column == "Amount"
    assert "row 1" in str(excinfo.value)


def test_excluded_rows_are_still_validated():
    text = csv_text(
        """
        Type,Trans Date,Post Date,Description,Amount
        Payment,01/02/2019,01/03/2019,Payment,not-a-number
        """
    )

    with pytest.raises(AmountParseError):
        parse_transactions(text, exclude_type="Payment")


def test_oversized_field_is_malformed_input():
    text = HEADER_LINE + "Sale,01/02/2019,01/03/2019," + "A" * 200_000 + ",-1\n"

    with pytest.raises(MalformedInputError, match="unreadable CSV") as excinfo:
        parse_transactions(text)

    assert excinfo.value.row == 1


def test_bare_carriage_return_in_field_is_malformed_input():
    text = (
        HEADER_LINE
        + "Sale,01/02/2019,01/03/2019,STARBUCKS,-4.50\n"
        + "Sale,01/02/2019,01/03/2019,A\rB,-1\n"
    )

    with pytest.raises(MalformedInputError, match="unreadable CSV") as excinfo:
        parse_transactions(text)

    assert excinfo.value.row == 2
