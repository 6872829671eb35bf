"""Tests for CSV import commands."""

from decimal import Decimal

from mahallu.cli.main import cli


def _invoke(cli_runner, temp_store, args, input=None):
    # Release the fixture session so the command sees a consistent file
    temp_store.disconnect()
    return cli_runner.invoke(cli, ["--db-path", temp_store.database_path, *args], input=input)


def test_import_members_successful(cli_runner, temp_store, ledger_service, hierarchy_service, fixtures_dir):
    """Test importing members into an empty ledger."""
    result = _invoke(cli_runner, temp_store, ["import", "members", str(fixtures_dir / "members.csv")])

    assert result.exit_code == 0
    assert "Import complete" in result.output
    assert "Imported: 3 members" in result.output
    assert "Failed: 0 rows" in result.output

    aisha = ledger_service.get_member_by_account_number("MB1001")
    assert aisha.husband_name == "Kareem"
    assert aisha.address == "Near Masjid, Ward 3"
    assert [b.name for b in hierarchy_service.list_blocks()] == ["North", "South"]


def test_import_members_reports_failed_rows(cli_runner, temp_store, ledger_service, fixtures_dir):
    """Test that bad rows are counted and explained."""
    result = _invoke(cli_runner, temp_store, ["import", "members", str(fixtures_dir / "members_bad_rows.csv")])

    assert result.exit_code == 0
    assert "Imported: 1 members" in result.output
    assert "Failed: 2 rows" in result.output
    assert "Row 3:" in result.output
    assert [m.account_number for m in ledger_service.list_members()] == ["MB1001"]


def test_import_members_duplicate_declined(cli_runner, temp_store, ledger_service, sample_member, fixtures_dir):
    """Test that declining the overwrite prompt imports nothing."""
    result = _invoke(
        cli_runner, temp_store, ["import", "members", str(fixtures_dir / "members.csv")], input="n\n"
    )

    assert result.exit_code == 0
    assert "1 member(s) in the file already exist" in result.output
    assert "MB1001" in result.output
    assert "Import cancelled." in result.output
    assert [m.account_number for m in ledger_service.list_members()] == ["MB1001"]


def test_import_members_duplicate_confirmed(cli_runner, temp_store, ledger_service, sample_member, fixtures_dir):
    """Test that confirming the prompt updates existing members and adds new ones."""
    result = _invoke(
        cli_runner, temp_store, ["import", "members", str(fixtures_dir / "members.csv")], input="y\n"
    )

    assert result.exit_code == 0
    assert "Imported: 3 members" in result.output
    assert len(ledger_service.list_members()) == 3
    assert ledger_service.get_member(sample_member.id).husband_name == "Kareem"


def test_import_members_missing_headers(cli_runner, temp_store, tmp_path):
    """Test that a file without the required columns is rejected."""
    csv_file = tmp_path / "members.csv"
    csv_file.write_text("Name,Phone\nAisha,9876543210\n")

    result = _invoke(cli_runner, temp_store, ["import", "members", str(csv_file)])

    assert result.exit_code == 1
    assert "CSV must include headers for" in result.output


def test_import_members_with_byte_order_mark(cli_runner, temp_store, ledger_service, tmp_path):
    """Test that spreadsheet exports with a BOM are read."""
    csv_file = tmp_path / "members.csv"
    csv_file.write_bytes("\ufeffname,houseNumber,block,cluster,phone\nAisha,1,North,A,9876543210\n".encode("utf-8"))

    result = _invoke(cli_runner, temp_store, ["import", "members", str(csv_file)])

    assert result.exit_code == 0
    assert ledger_service.list_members()[0].name == "Aisha"


def test_import_transactions(cli_runner, temp_store, ledger_service, import_service, fixtures_dir):
    """Test importing transactions for existing members."""
    import_service.import_members((fixtures_dir / "members.csv").read_text())

    result = _invoke(cli_runner, temp_store, ["import", "transactions", str(fixtures_dir / "transactions.csv")])

    assert result.exit_code == 0
    assert "Imported: 3 transactions" in result.output
    aisha = ledger_service.get_member_by_account_number("MB1001")
    assert ledger_service.get_balance(aisha.id) == Decimal("380")
    assert aisha.has_paid_registration_fee is False


def test_import_transactions_duplicate_confirmed(cli_runner, temp_store, ledger_service, import_service, fixtures_dir):
    """Test that existing transaction ids are replaced after confirmation."""
    import_service.import_members((fixtures_dir / "members.csv").read_text())
    import_service.import_transactions("transactionId,accountNumber,type,amount\nTX-1,MB1001,in,1\n")

    result = _invoke(
        cli_runner,
        temp_store,
        ["import", "transactions", str(fixtures_dir / "transactions.csv")],
        input="y\n",
    )

    assert result.exit_code == 0
    assert "1 transaction id(s) in the file already exist" in result.output
    assert "Imported: 3 transactions" in result.output
    assert len(ledger_service.list_transactions()) == 3


def test_import_missing_file(cli_runner, temp_store, tmp_path):
    """Test that a missing file is a usage error."""
    result = _invoke(cli_runner, temp_store, ["import", "members", str(tmp_path / "nope.csv")])

    assert result.exit_code == 2
