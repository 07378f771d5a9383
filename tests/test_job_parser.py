"""Tests for CSV job import parsing and small helpers."""

from datetime import date

import pytest

from app.utils.helpers import normalize_pagination, reminder_target_date, total_pages
from app.utils.job_parser import CSVImportError, parse_jobs_csv


def csv_bytes(text: str) -> bytes:
    return text.encode("utf-8")


class TestParseJobsCSV:
    def test_full_rows(self):
        parsed = parse_jobs_csv(csv_bytes(
            "company,role,status,deadline,applied_through,interview_date\n"
            "Acme,Data Analyst,Interview,2026-10-22,LinkedIn,2026-10-30\n"
            "Globex,Backend Engineer,,,,\n"
        ))

        assert parsed.skipped_rows == []
        assert parsed.rows == [
            {
                "company": "Acme",
                "role": "Data Analyst",
                "status": "Interview",
                "deadline": date(2026, 10, 22),
                "applied_through": "LinkedIn",
                "interview_date": date(2026, 10, 30),
            },
            {
                "company": "Globex",
                "role": "Backend Engineer",
                "status": "Applied",
                "deadline": None,
                "applied_through": None,
                "interview_date": None,
            },
        ]

    def test_headers_and_cells_are_trimmed(self):
        parsed = parse_jobs_csv(csv_bytes(
            " company , role ,deadline\n"
            "  Acme  ,  QA  , 2026-11-01 \n"
        ))

        assert parsed.rows[0]["company"] == "Acme"
        assert parsed.rows[0]["role"] == "QA"
        assert parsed.rows[0]["deadline"] == date(2026, 11, 1)

    def test_byte_order_mark_is_ignored(self):
        parsed = parse_jobs_csv("\ufeffcompany,role\nAcme,QA\n".encode("utf-8"))

        assert parsed.rows[0]["company"] == "Acme"

    def test_rows_missing_company_or_role_are_skipped(self):
        parsed = parse_jobs_csv(csv_bytes(
            "company,role\n"
            "Acme,QA\n"
            ",Designer\n"
            "Initech,\n"
            "Globex,SRE\n"
        ))

        assert [row["company"] for row in parsed.rows] == ["Acme", "Globex"]
        assert parsed.skipped_rows == [2, 3]

    def test_blank_lines_are_ignored(self):
        parsed = parse_jobs_csv(csv_bytes("company,role\n\nAcme,QA\n,\n"))

        assert len(parsed.rows) == 1
        assert parsed.skipped_rows == []

    def test_quoted_commas(self):
        parsed = parse_jobs_csv(csv_bytes('company,role\n"Acme, Inc.","Engineer, Platform"\n'))

        assert parsed.rows[0]["company"] == "Acme, Inc."
        assert parsed.rows[0]["role"] == "Engineer, Platform"

    def test_header_only(self):
        parsed = parse_jobs_csv(csv_bytes("company,role,deadline\n"))

        assert parsed.rows == []

    def test_invalid_date(self):
        with pytest.raises(CSVImportError, match="Row 1: invalid deadline"):
            parse_jobs_csv(csv_bytes("company,role,deadline\nAcme,QA,22/10/2026\n"))

    def test_not_utf8(self):
        with pytest.raises(CSVImportError, match="UTF-8"):
            parse_jobs_csv(b"company,role\n\xff\xfe\xfa,QA\n")


class TestPagination:
    @pytest.mark.parametrize(
        "page, limit, expected",
        [
            (1, 20, {"page": 1, "limit": 20, "offset": 0}),
            (3, 10, {"page": 3, "limit": 10, "offset": 20}),
            (0, 10, {"page": 1, "limit": 10, "offset": 0}),
            (-4, None, {"page": 1, "limit": 20, "offset": 0}),
            (2, 0, {"page": 2, "limit": 20, "offset": 20}),
            (1, 101, {"page": 1, "limit": 20, "offset": 0}),
            (1, 100, {"page": 1, "limit": 100, "offset": 0}),
        ],
    )
    def test_normalize_pagination(self, page, limit, expected):
        assert normalize_pagination(page, limit) == expected

    def test_total_pages(self):
        assert total_pages(0, 20) == 0
        assert total_pages(20, 20) == 1
        assert total_pages(21, 20) == 2


def test_reminder_target_date_crosses_month():
    assert reminder_target_date(date(2026, 10, 30), 3) == date(2026, 11, 2)
