"""End-to-end tests for the command line interface."""

import json

import pytest
from duoledger.cli.main import cli


def _created_id(output):
    """Extract the row id from output like "Created income 1a2b3c4d5e6f"."""
    for line in output.split("\n"):
        if line.startswith("Created "):
            return line.split()[-1]
    return None


@pytest.fixture
def invoke(cli_runner, temp_db):
    """Invoke the CLI against the temporary database."""

    def _invoke(*args, user=None):
        prefix = ["--data-path", temp_db.database_path]
        if user:
            prefix += ["--as", user]
        return cli_runner.invoke(cli, [*prefix, *args])

    return _invoke


@pytest.fixture
def ledger(invoke):
    """Initialized ledger with two income rows and one expense.

    Returns the created row ids.
    """
    result = invoke("init", "--party-a", "Debi", "--party-b", "Bocha", "--client", "Lions")
    assert result.exit_code == 0

    first = invoke(
        "income", "add",
        "--date", "2024-01-10",
        "--amount", "1000",
        "--by", "A",
        "--client", "Lions",
        "--invoice", "INV-1",
    )
    assert first.exit_code == 0, first.output

    second = invoke(
        "income", "add",
        "--date", "2024-02-05",
        "--amount", "900000",
        "--currency", "ARS",
        "--fx-rate", "1000",
        "--by", "Bocha",
        "--share-a", "40",
        "--share-b", "60",
    )
    assert second.exit_code == 0, second.output

    expense = invoke(
        "expense", "add",
        "--date", "2024-02-20",
        "--amount", "200",
        "--description", "Software",
    )
    assert expense.exit_code == 0, expense.output

    return {
        "first": _created_id(first.output),
        "second": _created_id(second.output),
        "expense": _created_id(expense.output),
    }


def test_help_does_not_need_storage(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "income" in result.output
    assert "summary" in result.output


def test_init_and_parties(invoke):
    result = invoke("init", "--party-a", "Debi", "--party-b", "Bocha", "--client", "Lions")

    assert result.exit_code == 0
    assert "Initialized ledger for Debi (A) and Bocha (B)" in result.output
    assert "Client: Lions (ID: c-" in result.output

    result = invoke("party", "list", user="Bocha")
    assert "A: Debi\n" in result.output
    assert "B: Bocha (current user)" in result.output


def test_init_rejects_same_names(invoke):
    result = invoke("init", "--party-a", "Debi", "--party-b", "debi")

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_clients(invoke):
    invoke("init", "--party-a", "Debi", "--party-b", "Bocha")

    result = invoke("client", "list")
    assert "No clients found" in result.output

    result = invoke("client", "add", "TGI")
    assert result.exit_code == 0
    assert "Created client 'TGI' (ID: c-" in result.output

    result = invoke("client", "add", "tgi")
    assert result.exit_code == 1
    assert "already exists" in result.output

    result = invoke("client", "list")
    assert "TGI (ID: c-" in result.output


def test_rows_are_created(ledger):
    assert all(ledger.values())


def test_debt(ledger, invoke):
    result = invoke("debt")

    assert result.exit_code == 0
    # -500 (income by Debi) + 360 (income by Bocha) + 100 (expense by Debi)
    assert "Debi owes Bocha $40.00" in result.output


def test_summary_all_time(ledger, invoke):
    result = invoke("summary", "--period", "all")

    assert result.exit_code == 0
    assert "$1,900.00" in result.output
    assert "Debi's Share" in result.output
    assert "$860.00" in result.output
    assert "$1,040.00" in result.output
    assert "Debi owes Bocha $40.00" in result.output
    assert "2024-01" in result.output
    assert "2024-02" in result.output


def test_summary_as_other_party(ledger, invoke):
    result = invoke("summary", "--period", "all", user="B")

    assert result.exit_code == 0
    assert "Bocha's Share" in result.output


def test_summary_date_range_and_client(ledger, invoke):
    result = invoke(
        "summary", "--start-date", "2024-02-01", "--end-date", "2024-02-29", "--client", "Lions"
    )

    assert result.exit_code == 0
    assert "Period: 2024-02-01 to 2024-02-29" in result.output
    assert "-$200.00" in result.output


def test_summary_rejects_period_with_dates(ledger, invoke):
    result = invoke("summary", "--period", "ytd", "--start-date", "2024-01-01")

    assert result.exit_code == 1
    assert "--period cannot be combined" in result.output


def test_summary_empty_range(ledger, invoke):
    result = invoke("summary", "--start-date", "2020-01-01", "--end-date", "2020-12-31")

    assert result.exit_code == 0
    assert "No transactions found." in result.output


def test_missing_exchange_rate_is_rejected(ledger, invoke):
    result = invoke("income", "add", "--amount", "900000", "--currency", "ARS")

    assert result.exit_code == 1
    assert "Exchange rate required for ARS" in result.output

    listing = invoke("income", "list", "--period", "all")
    assert listing.output.count("\n") == 2


def test_list_update_delete(ledger, invoke):
    result = invoke("income", "list", "--period", "all")
    lines = result.output.strip().split("\n")
    assert lines[0].startswith(ledger["second"])
    assert lines[1].startswith(ledger["first"])

    result = invoke("income", "update", ledger["first"], "--amount", "1200")
    assert result.exit_code == 0
    assert f"Updated income {ledger['first']}" in result.output
    assert "$1,200.00" in result.output

    result = invoke("expense", "delete", ledger["expense"])
    assert result.exit_code == 0
    assert f"Deleted expense {ledger['expense']}" in result.output

    result = invoke("expense", "list", "--period", "all")
    assert "No expense rows found." in result.output

    result = invoke("expense", "delete", ledger["expense"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_update_without_options(ledger, invoke):
    result = invoke("income", "update", ledger["first"])

    assert result.exit_code == 1
    assert "Nothing to update" in result.output


def test_list_by_party(ledger, invoke):
    result = invoke("income", "list", "--period", "all", "--by", "Bocha")

    assert ledger["second"] in result.output
    assert ledger["first"] not in result.output


def test_adjustments(ledger, invoke):
    result = invoke("adjust", "add", "income", ledger["first"], "-3", "--label", "Bank tax")
    assert result.exit_code == 0, result.output
    assert "Net amount: $970.00" in result.output

    result = invoke("adjust", "add", "income", ledger["first"], "-50", "--fixed", "--label", "Fee")
    assert result.exit_code == 0, result.output
    assert "Net amount: $920.00" in result.output

    result = invoke("adjust", "list", "income", ledger["first"])
    assert "1. " in result.output
    assert "Bank tax" in result.output
    assert "2. " in result.output
    adjustment_id = result.output.split("\n")[0].split()[1]

    result = invoke("adjust", "remove", "income", ledger["first"], adjustment_id)
    assert result.exit_code == 0
    assert f"Removed adjustment {adjustment_id}" in result.output

    result = invoke("adjust", "remove", "income", ledger["first"], adjustment_id)
    assert result.exit_code == 1


def test_party_rename(ledger, invoke):
    result = invoke("party", "rename", "B", "Roberto")

    assert result.exit_code == 0
    assert invoke("debt").output.strip() == "Debi owes Roberto $40.00"


def test_export_and_import(ledger, invoke, tmp_path):
    export_path = tmp_path / "backup.json"

    result = invoke("export", "--output", str(export_path))
    assert result.exit_code == 0
    data = json.loads(export_path.read_text(encoding="utf-8"))
    assert len(data["incomeTransactions"]) == 2
    assert data["meta"]["parties"] == ["Debi", "Bocha"]

    invoke("expense", "delete", ledger["expense"])
    assert "Debi owes Bocha $140.00" in invoke("debt").output

    result = invoke("import", str(export_path))
    assert result.exit_code == 0
    assert "Expenses: 1 rows" in result.output
    assert "Debi owes Bocha $40.00" in invoke("debt").output


def test_invalid_import_leaves_ledger_unchanged(ledger, invoke, tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    result = invoke("import", str(broken))

    assert result.exit_code == 1
    assert "Invalid ledger file" in result.output
    assert "Debi owes Bocha $40.00" in invoke("debt").output


def test_change_log(ledger, invoke):
    result = invoke("log", "--limit", "2")

    assert result.exit_code == 0
    lines = result.output.strip().split("\n")
    assert len(lines) == 2
    assert "add_expense" in lines[0]
    assert "Debi" in lines[0]


def test_settings_and_logo(ledger, invoke, tmp_path):
    logo = tmp_path / "logo.png"
    logo.write_bytes(b"\x89PNG\r\n\x1a\n")

    assert invoke("settings", "period", "ytd").exit_code == 0
    assert invoke("logo", str(logo)).exit_code == 0

    result = invoke("settings", "show")
    assert "Default period: ytd" in result.output
    assert "Logo: set" in result.output

    assert invoke("logo", "--clear").exit_code == 0
    assert "Logo: not set" in invoke("settings", "show").output

    assert invoke("logo").exit_code == 1


def test_json_data_path(cli_runner, tmp_path):
    path = tmp_path / "ledger.json"

    result = cli_runner.invoke(
        cli, ["--data-path", str(path), "init", "--party-a", "Debi", "--party-b", "Bocha"]
    )
    assert result.exit_code == 0

    result = cli_runner.invoke(
        cli,
        ["--data-path", str(path), "expense", "add", "--amount", "300", "--by", "B"],
    )
    assert result.exit_code == 0

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["expenseTransactions"][0]["responsibleParty"] == "B"
    assert "Debi owes Bocha $150.00" in cli_runner.invoke(
        cli, ["--data-path", str(path), "debt"]
    ).output


def test_corrupt_json_ledger_reports_error(cli_runner, tmp_path):
    path = tmp_path / "ledger.json"
    path.write_text("{not json", encoding="utf-8")

    for args in (["debt"], ["summary"], ["income", "list"], ["log"], ["export"]):
        result = cli_runner.invoke(cli, ["--data-path", str(path), *args])

        assert result.exit_code == 1, args
        assert "Error: Invalid JSON" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)


def test_summary_excludes_row_with_unreadable_rate(cli_runner, tmp_path):
    path = tmp_path / "ledger.json"
    base = ["--data-path", str(path)]
    cli_runner.invoke(cli, [*base, "init", "--party-a", "Debi", "--party-b", "Bocha"])
    cli_runner.invoke(
        cli, [*base, "income", "add", "--date", "2024-01-10", "--amount", "1000", "--by", "A"]
    )
    created = cli_runner.invoke(
        cli,
        [
            *base, "income", "add",
            "--date", "2024-01-12",
            "--amount", "900000",
            "--currency", "ARS",
            "--fx-rate", "1000",
            "--by", "B",
        ],
    )
    ars_id = _created_id(created.output)

    data = json.loads(path.read_text(encoding="utf-8"))
    for row in data["incomeTransactions"]:
        if row["id"] == ars_id:
            row["fxRate"] = "abc"
    path.write_text(json.dumps(data), encoding="utf-8")

    result = cli_runner.invoke(cli, [*base, "summary", "--period", "all"])

    assert result.exit_code == 0, result.output
    assert "$1,000.00" in result.output
    assert "Debi owes Bocha $500.00" in result.output
    assert f"ERROR {ars_id}:" in result.output
    assert "(excluded)" in result.output

    result = cli_runner.invoke(cli, [*base, "debt"])

    assert result.exit_code == 0, result.output
    assert "Debi owes Bocha $500.00" in result.output
    assert f"Skipped {ars_id}:" in result.output
