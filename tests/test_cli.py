"""End-to-end tests for the command line interface."""

import json
import re
from datetime import date

import pytest

from spendtrack.cli.main import cli
from spendtrack.database.factories import create_sqlite_storage
from spendtrack.database.persistence import PersistenceAdapter
from spendtrack.domain.store import TransactionStore


@pytest.fixture
def run(cli_runner, db_path):
    """Invoke the CLI against the test database."""

    def _run(*args, input=None):
        return cli_runner.invoke(cli, ["--db-path", db_path, *args], input=input)

    return _run


@pytest.fixture
def open_store(db_path):
    """Open a fresh store on the CLI database to inspect its state."""
    storages = []

    def _open():
        storage = create_sqlite_storage(database_path=db_path)
        storages.append(storage)
        return TransactionStore(PersistenceAdapter(storage))

    yield _open
    for storage in storages:
        storage.disconnect()


def add(run, description="Coffee", amount="4.50", category="Food", when="2024-06-01"):
    result = run(
        "add",
        "--description", description,
        "--amount", amount,
        "--category", category,
        "--date", when,
    )
    assert result.exit_code == 0, result.output
    return re.search(r"Created transaction (txn_\w+)", result.output).group(1)


def test_help_does_not_need_storage(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "add" in result.output
    assert "import" in result.output


class TestAdd:
    """Tests for the add command."""

    def test_add(self, run, open_store):
        transaction_id = add(run)

        txn = open_store().get_transaction(transaction_id)
        assert txn.description == "Coffee"
        assert str(txn.amount) == "4.50"
        assert txn.date == date(2024, 6, 1)

    def test_add_normalizes_description(self, run, open_store):
        add(run, description="  Lunch   with  team ")
        assert open_store().get_transactions()[0].description == "Lunch with team"

    def test_add_defaults_to_today(self, run, open_store):
        result = run("add", "--description", "Coffee", "--amount", "3", "--category", "Food")
        assert result.exit_code == 0, result.output
        assert open_store().get_transactions()[0].date == date.today()

    def test_add_reports_every_invalid_field(self, run, open_store):
        result = run(
            "add",
            "--description", "lunch lunch",
            "--amount", "12.555",
            "--category", "Food",
            "--date", "2024-06-01",
        )

        assert result.exit_code == 1
        assert "Error: description: Description contains duplicate words" in result.output
        assert "Error: amount:" in result.output
        assert "category" not in result.output
        assert open_store().get_transactions() == []

    def test_add_rejects_future_date(self, run):
        result = run(
            "add", "--description", "Coffee", "--amount", "3", "--category", "Food",
            "--date", "2999-01-01",
        )
        assert result.exit_code == 1
        assert "Date cannot be in the future" in result.output

    def test_add_new_category_is_remembered(self, run):
        add(run, category="Garden")
        result = run("category", "list")
        assert "Garden" in result.output.splitlines()

    def test_add_shows_limit_warning(self, run):
        assert run("settings", "set", "--limit", "10").exit_code == 0

        result = run("add", "--description", "Groceries", "--amount", "9", "--category", "Food")

        assert result.exit_code == 0, result.output
        assert "WARNING: You've used 90.0% of your monthly limit ($9.00 of $10.00)" in result.output


class TestTransactionCommands:
    """Tests for show, update and delete."""

    def test_show(self, run):
        transaction_id = add(run)
        result = run("transaction", "show", transaction_id)
        assert result.exit_code == 0
        assert f"Transaction ID: {transaction_id}" in result.output
        assert "Amount: $4.50" in result.output

    def test_show_missing(self, run):
        result = run("transaction", "show", "txn_missing")
        assert result.exit_code == 1
        assert "Transaction txn_missing not found" in result.output

    def test_update(self, run, open_store):
        transaction_id = add(run)

        result = run("transaction", "update", transaction_id, "--amount", "5.25", "--category", "Eating Out")

        assert result.exit_code == 0, result.output
        assert f"Updated transaction {transaction_id}" in result.output
        txn = open_store().get_transaction(transaction_id)
        assert str(txn.amount) == "5.25"
        assert txn.category == "Eating Out"
        assert txn.description == "Coffee"
        assert txn.updated_at >= txn.created_at

    def test_update_validates_fields(self, run, open_store):
        transaction_id = add(run)
        result = run("transaction", "update", transaction_id, "--amount", "0")
        assert result.exit_code == 1
        assert "Amount must be greater than 0" in result.output
        assert str(open_store().get_transaction(transaction_id).amount) == "4.50"

    def test_update_requires_a_field(self, run):
        transaction_id = add(run)
        result = run("transaction", "update", transaction_id)
        assert result.exit_code == 1
        assert "Nothing to update" in result.output

    def test_update_missing(self, run):
        result = run("transaction", "update", "txn_missing", "--description", "Tea time")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_delete(self, run, open_store):
        transaction_id = add(run)

        result = run("transaction", "delete", transaction_id)

        assert result.exit_code == 0
        assert open_store().get_transactions() == []
        assert run("transaction", "delete", transaction_id).exit_code == 1


class TestView:
    """Tests for the view command."""

    @pytest.fixture(autouse=True)
    def seeded(self, run):
        add(run, "Coffee at cafe", "4.50", "Food", "2024-06-01")
        add(run, "Bus ticket", "2.75", "Transport", "2024-06-03")
        add(run, "Python textbook", "45.00", "Books", "2024-05-20")

    def test_view_all(self, run):
        result = run("view")
        assert result.exit_code == 0
        assert "Found 3 transaction(s):" in result.output
        assert "Total: $52.25" in result.output

    def test_view_search(self, run):
        result = run("view", "--search", "coffee|bus")
        assert "Found 2 transaction(s):" in result.output
        assert "Coffee at cafe" in result.output
        assert "Python textbook" not in result.output

    def test_view_case_sensitive(self, run):
        result = run("view", "--search", "coffee", "--case-sensitive")
        assert "No transactions found." in result.output

    def test_view_preset(self, run):
        result = run("view", "--preset", "Books/Education")
        assert "Found 1 transaction(s):" in result.output
        assert "Python textbook" in result.output

    def test_view_search_and_preset_conflict(self, run):
        result = run("view", "--search", "x", "--preset", "Transport")
        assert result.exit_code == 1

    def test_view_invalid_pattern(self, run):
        result = run("view", "--search", "[unclosed")
        assert result.exit_code == 1
        assert "Invalid search pattern" in result.output

    def test_view_filters(self, run):
        result = run(
            "view",
            "--start-date", "2024-06-01",
            "--end-date", "2024-06-30",
            "--category", "Food",
            "--category", "Transport",
            "--min-amount", "3",
        )
        assert "Found 1 transaction(s):" in result.output
        assert "Coffee at cafe" in result.output

    def test_view_sort(self, run):
        output = run("view", "--sort", "amount-asc").output
        assert output.index("Bus ticket") < output.index("Coffee at cafe") < output.index("Python textbook")

        output = run("view").output
        assert output.index("Bus ticket") < output.index("Coffee at cafe") < output.index("Python textbook")

        output = run("view", "--sort", "description-desc").output
        assert output.index("Python textbook") < output.index("Coffee at cafe") < output.index("Bus ticket")

    def test_view_suggestions(self, run):
        result = run("view", "--search", "Python", "--category", "Food")
        assert "No transactions found." in result.output
        assert "Suggestions: Python textbook" in result.output

    def test_view_rejects_two_periods(self, run):
        result = run("view", "--this-month", "--last-month")
        assert result.exit_code == 1
        assert "Only one period option" in result.output


class TestSummaryAndSettings:
    """Tests for summary, settings and categories."""

    def test_summary(self, run):
        add(run, "Coffee", "4.50", "Food")
        add(run, "Textbook", "20", "Books")

        result = run("summary", "--currency", "EUR")

        assert result.exit_code == 0, result.output
        assert "Transactions:" in result.output
        assert "$24.50" in result.output
        assert re.search(r"Top category:\s+Books", result.output)
        assert "Total in EUR:" in result.output
        assert "20.83" in result.output

    def test_summary_unknown_currency(self, run):
        result = run("summary", "--currency", "JPY")
        assert result.exit_code == 1
        assert "No exchange rate for 'JPY'" in result.output

    def test_settings_set_and_show(self, run):
        result = run("settings", "set", "--currency", "€", "--limit", "250", "--rate", "jpy=160")
        assert result.exit_code == 0, result.output
        assert "Settings updated" in result.output

        output = run("settings", "show").output
        assert "Currency symbol: €" in output
        assert "Monthly limit:   €250.00" in output
        assert "1 USD = 160" in output
        assert "1 USD = 0.85 EUR" in output

    def test_clear_limit(self, run, open_store):
        run("settings", "set", "--limit", "250")
        assert run("settings", "set", "--clear-limit").exit_code == 0
        assert open_store().settings.spending_limit is None

    @pytest.mark.parametrize(
        "args",
        [
            (),
            ("--rate", "EUR"),
            ("--rate", "EUR=0"),
            ("--limit", "abc"),
            ("--limit", "5", "--clear-limit"),
        ],
    )
    def test_settings_set_errors(self, run, args):
        result = run("settings", "set", *args)
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_category_add(self, run):
        assert "Created category 'Garden'" in run("category", "add", "Garden").output
        assert "already exists" in run("category", "add", "Garden").output
        assert "Garden" in run("category", "list").output.splitlines()

    def test_category_add_invalid(self, run):
        result = run("category", "add", "F00d")
        assert result.exit_code == 1
        assert "letters, spaces, and hyphens" in result.output


class TestTransfer:
    """Tests for export, import and clear."""

    def test_export_to_stdout(self, run):
        add(run)
        result = run("export")
        assert result.exit_code == 0
        document = json.loads(result.output)
        assert document["version"] == "1.0"
        assert document["transactions"][0]["description"] == "Coffee"

    def test_export_and_import_file(self, run, open_store, tmp_path):
        add(run, "Coffee", "4.50", "Food")
        add(run, "Bus ticket", "2.75", "Transport")
        target = tmp_path / "backup.json"

        result = run("export", "-o", str(target))
        assert result.exit_code == 0
        assert "Exported 2 transactions to" in result.output

        assert run("clear", "--yes").exit_code == 0
        assert open_store().get_transactions() == []

        result = run("import", str(target))
        assert result.exit_code == 0, result.output
        assert "Imported 2 transactions" in result.output
        assert [t.description for t in open_store().get_transactions()] == ["Coffee", "Bus ticket"]

    def test_import_invalid_file_changes_nothing(self, run, open_store, tmp_path):
        add(run)
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"transactions": [{"id": "txn_1", "description": "Tea"}]}))

        result = run("import", str(bad))

        assert result.exit_code == 1
        assert "missing required field 'amount'" in result.output
        assert [t.description for t in open_store().get_transactions()] == ["Coffee"]

    def test_clear_needs_confirmation(self, run, open_store):
        add(run)
        result = run("clear", input="n\n")
        assert result.exit_code == 1
        assert len(open_store().get_transactions()) == 1

    def test_clear(self, run, open_store):
        add(run)
        run("settings", "set", "--currency", "€")

        result = run("clear", "--yes")

        assert "All data cleared" in result.output
        store = open_store()
        assert store.get_transactions() == []
        assert store.settings.currency == "$"
