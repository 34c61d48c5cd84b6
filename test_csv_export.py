import csv
import io
from datetime import date

import pytest

from medstore.errors import ValidationError
from medstore.utils.csv_export import to_csv
from medstore.utils.formatting import format_currency, format_date, format_date_short


def test_csv_round_trip():
    headers = ["Name", "Note", "Qty"]
    rows = [
        {"Name": "Paracetamol 500mg", "Note": 'He said "twice daily"', "Qty": 10},
        {"Name": "Syrup, cough", "Note": "line one\nline two", "Qty": 0},
        {"Name": "Aspirin", "Note": None, "Qty": 3},
    ]
    text = to_csv(headers, rows)

    parsed = list(csv.DictReader(io.StringIO(text)))
    assert len(parsed) == 3
    assert parsed[0]["Note"] == 'He said "twice daily"'
    assert parsed[1]["Name"] == "Syrup, cough"
    assert parsed[1]["Note"] == "line one\nline two"
    assert parsed[1]["Qty"] == "0"
    assert parsed[2]["Note"] == ""


def test_csv_layout():
    text = to_csv(["A", "B"], [{"A": 'x"y', "B": 1}])
    assert text == '"A","B"\n"x""y","1"'
    assert not text.endswith("\n")


def test_csv_missing_column_is_blank():
    assert to_csv(["A", "B"], [{"A": 1}]) == '"A","B"\n"1",""'


def test_csv_needs_rows():
    with pytest.raises(ValidationError):
        to_csv(["A"], [])


def test_currency():
    assert format_currency(123456.5) == "₹1,23,456.50"
    assert format_currency(1000) == "₹1,000.00"
    assert format_currency(12) == "₹12.00"
    assert format_currency("10000000") == "₹1,00,00,000.00"
    assert format_currency("-12.345") == "-₹12.35"


def test_dates():
    assert format_date(date(2024, 4, 15)) == "15 Apr 2024"
    assert format_date("2024-12-01") == "01 Dec 2024"
    assert format_date(None) == "N/A"
    assert format_date_short(date(2024, 4, 5)) == "5/4/2024"
