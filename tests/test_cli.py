import pytest
from typer.testing import CliRunner

from takeout_wrapped.cli import app
from takeout_wrapped.store import DataStore

TX_MEMBER = "Google transactions/transactions_42.csv"
TX_CSV = (
    "Time,ID,Description,Amount\n"
    "2023-06-01T10:00:00,T1,Swiggy order,INR 100.00\n"
    "2024-02-01T10:00:00,T2,Uber trip,INR 300.00\n"
)

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_dotenv(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


def test_categorize_prints_one_line_per_description():
    result = runner.invoke(app, ["categorize", "Sent ₹500 to Rahul", "Paid ₹350 to Dominos Pizza"])

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        "Transfers\tSent ₹500 to Rahul",
        "Food\tPaid ₹350 to Dominos Pizza",
    ]


def test_summary_all_years(tmp_path, make_zip):
    archive = tmp_path / "takeout.zip"
    archive.write_bytes(make_zip({TX_MEMBER: TX_CSV}))

    result = runner.invoke(app, ["summary", str(archive)])

    assert result.exit_code == 0, result.output
    assert "Year: all (available: 2024, 2023)" in result.output
    assert "transactions: 2" in result.output
    assert "Total spent: ₹400.00" in result.output
    assert "Travel & Transport" in result.output
    assert "Food" in result.output


def test_summary_single_year(tmp_path, make_zip):
    archive = tmp_path / "takeout.zip"
    archive.write_bytes(make_zip({TX_MEMBER: TX_CSV}))

    result = runner.invoke(app, ["summary", str(archive), "--year", "2023"])

    assert result.exit_code == 0, result.output
    assert "transactions: 1" in result.output
    assert "Total spent: ₹100.00" in result.output
    assert "Travel & Transport" not in result.output


def test_summary_rejects_bad_year(tmp_path, make_zip):
    archive = tmp_path / "takeout.zip"
    archive.write_bytes(make_zip({TX_MEMBER: TX_CSV}))

    result = runner.invoke(app, ["summary", str(archive), "-y", "soon"])

    assert result.exit_code == 2


def test_summary_reports_unrecognized_archive(tmp_path, make_zip):
    archive = tmp_path / "other.zip"
    archive.write_bytes(make_zip({"Maps/places.json": "{}"}))

    result = runner.invoke(app, ["summary", str(archive)])

    assert result.exit_code == 1
    assert "No Google Pay data" in result.output


def test_summary_fails_cleanly_when_nothing_was_parsed(tmp_path, make_zip, monkeypatch):
    archive = tmp_path / "takeout.zip"
    archive.write_bytes(make_zip({TX_MEMBER: TX_CSV}))
    monkeypatch.setattr(DataStore, "parse_raw_data", lambda self: None)

    result = runner.invoke(app, ["summary", str(archive)])

    assert result.exit_code == 1
    assert "No data was parsed" in result.output
