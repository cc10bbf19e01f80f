"""
Unit tests for CSV row validation.
"""
import io

import pytest

from grc.services.csv_ingest import (
    NAME_REQUIRED, RISK_SCORE_NOT_NUMBER, parse_risk_score, validate_row, validate_rows,
)


def lines(text):
    return io.StringIO(text)


class TestValidateRow:
    def test_accepts_full_row(self):
        fields, error = validate_row({
            "name": " Acme ", "email": "sec@acme.example.com", "company": "Acme Corp",
            "role": "Vendor", "industry": "Tech", "riskscore": "42.5",
        })
        assert error is None
        assert fields == {
            "name": "Acme", "email": "sec@acme.example.com", "company": "Acme Corp",
            "role": "Vendor", "industry": "Tech", "risk_score": 42.5,
        }

    def test_headers_are_case_insensitive(self):
        fields, error = validate_row({"Name": "Acme", " RiskScore ": "7", "INDUSTRY": "Tech"})
        assert error is None
        assert fields["risk_score"] == 7.0
        assert fields["industry"] == "Tech"

    def test_missing_optional_columns_default_to_empty(self):
        fields, _ = validate_row({"name": "Acme"})
        assert fields["email"] == fields["company"] == fields["role"] == fields["industry"] == ""
        assert fields["risk_score"] == 0.0

    def test_missing_name(self):
        assert validate_row({"name": "  ", "riskscore": "5"}) == (None, NAME_REQUIRED)

    def test_name_checked_before_risk_score(self):
        assert validate_row({"name": "", "riskscore": "x"}) == (None, NAME_REQUIRED)

    @pytest.mark.parametrize("raw", ["x", "12abc", "nan", "inf", "-Infinity"])
    def test_non_numeric_risk_score(self, raw):
        assert validate_row({"name": "Acme", "riskscore": raw}) == (None, RISK_SCORE_NOT_NUMBER)


class TestParseRiskScore:
    def test_blank_is_zero(self):
        assert parse_risk_score("") == 0.0

    def test_numbers(self):
        assert parse_risk_score("3") == 3.0
        assert parse_risk_score("-1.25") == -1.25
        assert parse_risk_score("1e2") == 100.0


class TestValidateRows:
    def test_mixed_file(self):
        report = validate_rows(lines(
            "name,riskscore\n"
            "Acme,10\n"
            ",x\n"
            "Globex,abc\n"
            "Initech,\n"
        ))
        assert [row["name"] for row in report.accepted] == ["Acme", "Initech"]
        assert [(e.row_number, e.error) for e in report.errors] == [
            (2, NAME_REQUIRED),
            (3, RISK_SCORE_NOT_NUMBER),
        ]
        assert report.errors[1].row == {"name": "Globex", "riskscore": "abc"}
        assert len(report.accepted) + len(report.errors) == report.total_rows == 4

    def test_header_only(self):
        report = validate_rows(lines("name,email\n"))
        assert report.total_rows == 0

    def test_extra_cells_are_ignored(self):
        report = validate_rows(lines("name\nAcme,unexpected\n"))
        assert report.accepted[0]["name"] == "Acme"

    def test_short_rows_fill_with_blanks(self):
        report = validate_rows(lines("name,industry,riskscore\nAcme\n"))
        assert report.accepted == [{
            "name": "Acme", "risk_score": 0.0,
            "email": "", "company": "", "role": "", "industry": "",
        }]
