"""Tests for SIE export."""

from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from sieledger.domain.errors import UnauthorizedError
from sieledger.domain.sie_export import (
    SieCompanyInfo,
    SieExportAccount,
    SieExportBalance,
    SieExportData,
    SieExportEntry,
    SieExportVerification,
    account_type,
    generate_sie,
    quote,
    sie_filename,
)
from sieledger.domain.sie_parser import parse_sie


@pytest.mark.parametrize(
    "account, expected",
    [("1930", "T"), ("2440", "S"), ("3010", "I"), ("4010", "K"), ("8410", "K"), ("9999", None)],
)
def test_account_type(account, expected):
    assert account_type(account) == expected


def test_quote_drops_embedded_quotes():
    assert quote('Hyra "januari"') == '"Hyra januari"'


def test_sie_filename():
    assert sie_filename("556677-8899", 2024) == "bokforing_5566778899_2024.se"
    assert sie_filename("", 2024) == "bokforing_export_2024.se"


def _company():
    return SieCompanyInfo(
        name="Testbolaget AB",
        org_number="556677-8899",
        fiscal_year_start=date(2024, 1, 1),
        fiscal_year_end=date(2024, 12, 31),
        previous_year_start=date(2023, 1, 1),
        previous_year_end=date(2023, 12, 31),
        tax_year=2025,
    )


class TestGenerateSie:
    """Tests for generate_sie."""

    def test_header_and_blocks(self):
        data = SieExportData(
            company=_company(),
            accounts=[
                SieExportAccount(number="5010", name="Lokalhyra", type="K"),
                SieExportAccount(number="1930", name="Företagskonto", type="T"),
            ],
            closing_balances=[
                SieExportBalance(account="1930", amount=Decimal("40000")),
                SieExportBalance(account="2440", amount=Decimal("0")),
            ],
            result_balances=[SieExportBalance(account="5010", amount=Decimal("10000"))],
            verifications=[
                SieExportVerification(
                    series="A",
                    number=1,
                    date=date(2024, 1, 15),
                    description="Hyra januari",
                    entries=(
                        SieExportEntry(account="5010", amount=Decimal("10000")),
                        SieExportEntry(account="1930", amount=Decimal("-10000"), description="Bank"),
                    ),
                    registered=date(2024, 1, 16),
                )
            ],
            generated_at=datetime(2025, 1, 10, tzinfo=UTC),
        )
        content = generate_sie(data)
        lines = content.split("\r\n")

        assert lines[:5] == [
            "#FLAGGA 0",
            '#PROGRAM "sieledger" "1.0"',
            "#FORMAT PC8",
            "#GEN 20250110",
            "#SIETYP 4",
        ]
        assert "#ORGNR 5566778899" in lines
        assert '#FNAMN "Testbolaget AB"' in lines
        assert "#TAXAR 2025" in lines
        assert "#RAR 0 20240101 20241231" in lines
        assert "#RAR -1 20230101 20231231" in lines
        assert lines.index('#KONTO 1930 "Företagskonto"') < lines.index('#KONTO 5010 "Lokalhyra"')
        assert "#KTYP 1930 T" in lines
        assert "#UB 0 1930 40000.00" in lines
        assert "#RES 0 5010 10000.00" in lines
        assert not any(line.startswith("#UB 0 2440") for line in lines)
        assert '#VER A 1 20240115 "Hyra januari" 20240116' in lines
        assert "\t#TRANS 5010 {} 10000.00 20240115" in lines
        assert '\t#TRANS 1930 {} -10000.00 20240115 "Bank"' in lines
        assert "\n" not in content.replace("\r\n", "")

    def test_verifications_sorted_by_series_and_number(self):
        def verification(series, number):
            return SieExportVerification(
                series=series,
                number=number,
                date=date(2024, 1, 1),
                description=f"{series}{number}",
                entries=(),
            )

        data = SieExportData(
            company=_company(),
            verifications=[verification("B", 1), verification("A", 10), verification("A", 2)],
        )
        ver_lines = [line for line in generate_sie(data).split("\r\n") if line.startswith("#VER")]
        assert [line.split()[1] + line.split()[2] for line in ver_lines] == ["A2", "A10", "B1"]


class TestSieExportService:
    """Tests for SieExportService."""

    def test_round_trip_through_parser(
        self, export_service, user_id, sample_verifications
    ):
        content = export_service.export_year(user_id, 2024, "Testbolaget AB", "556677-8899")
        document = parse_sie(content)

        assert document.warnings == []
        assert document.fiscal_year.start == date(2024, 1, 1)
        assert [v.voucher_id for v in document.verifications] == ["A1", "A2", "A3", "A4"]
        assert all(v.is_balanced for v in document.verifications)
        rent = document.verifications[0]
        assert rent.date == "20240115"
        assert rent.description == "Hyra januari"
        assert [(r.account, r.amount) for r in rent.rows] == [
            ("5010", Decimal("10000.00")),
            ("1930", Decimal("-10000.00")),
        ]

    def test_account_names_from_imported_transactions(
        self, export_service, import_service, user_id, sample_sie, sample_verifications
    ):
        import_service.import_sie(sample_sie, user_id)
        content = export_service.export_year(user_id, 2024, "Testbolaget AB")
        document = parse_sie(content)

        assert document.account_name("5010") == "Lokalhyra"
        assert document.account_name("6110") == "Konto 6110"

    def test_balances_from_stored_account_balances(
        self, export_service, temp_db, user_id, sample_verifications
    ):
        temp_db.upsert_account_balance(user_id, "1930", "2024-01", Decimal("50000"))
        temp_db.upsert_account_balance(user_id, "1930", "2024-12", Decimal("62500"))
        temp_db.upsert_account_balance(user_id, "3010", "2024-12", Decimal("-33000"))
        temp_db.upsert_account_balance(user_id, "1930", "2023-12", Decimal("1"))

        lines = export_service.export_year(user_id, 2024, "Testbolaget AB").split("\r\n")
        assert "#UB 0 1930 62500.00" in lines
        assert "#RES 0 3010 -33000.00" in lines

        without = export_service.export_year(
            user_id, 2024, "Testbolaget AB", include_balances=False
        ).split("\r\n")
        assert not any(line.startswith(("#UB", "#RES")) for line in without)

    def test_empty_year(self, export_service, user_id):
        content = export_service.export_year(user_id, 2030, "Testbolaget AB")
        assert "#VER" not in content
        assert "#RAR 0 20300101 20301231" in content

    def test_requires_user(self, export_service):
        with pytest.raises(UnauthorizedError):
            export_service.export_year(None, 2024, "Testbolaget AB")
