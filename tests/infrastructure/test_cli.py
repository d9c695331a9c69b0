"""CLI tests using click's CliRunner against a temporary database."""

import pytest
from click.testing import CliRunner

from shopcore.infrastructure.cli.main import cli


@pytest.fixture
def runner(database_url, monkeypatch) -> CliRunner:
    monkeypatch.setenv("SHOPCORE_DATABASE_URL", database_url)
    monkeypatch.setenv("SHOPCORE_ENV", "test")
    return CliRunner()


class TestProductCommands:

    def test_add_then_list(self, runner):
        result = runner.invoke(
            cli, ["product", "add", "--id", "sku-1", "--name", "Lamp", "--price", "19.99", "--stock", "3"]
        )
        assert result.exit_code == 0, result.output
        assert "sku-1" in result.output

        result = runner.invoke(cli, ["product", "list"])
        assert "Lamp" in result.output
        assert "$19.99" in result.output

    def test_duplicate_add_fails_cleanly(self, runner, container):
        result = runner.invoke(
            cli, ["product", "add", "--id", "P", "--name", "Again", "--price", "1.00"]
        )
        assert result.exit_code != 0
        assert "already exists" in result.output

    def test_update_price(self, runner, container):
        result = runner.invoke(cli, ["product", "update", "--id", "P", "--price", "29.99"])
        assert result.exit_code == 0, result.output
        assert "$29.99" in runner.invoke(cli, ["product", "list"]).output

    def test_empty_catalog(self, runner):
        result = runner.invoke(cli, ["product", "list"])
        assert "No products found." in result.output


class TestInventoryCommands:

    def test_set_and_show(self, runner, container):
        result = runner.invoke(cli, ["inventory", "set", "--product", "P", "--quantity", "42"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, ["inventory", "show"])
        assert result.exit_code == 0
        line = next(ln for ln in result.output.splitlines() if ln.startswith("P "))
        assert line.split()[-1] == "42"

    def test_negative_stock_rejected(self, runner, container):
        result = runner.invoke(cli, ["inventory", "set", "--product", "P", "--quantity", "-1"])
        assert result.exit_code != 0
        assert "negative" in result.output


class TestOrderCommands:

    @pytest.fixture
    def order_id(self, container) -> int:
        container.cart_store().add("alice", "P", 3)
        return container.order_engine().create_order("alice").id

    def test_list_and_show(self, runner, order_id):
        result = runner.invoke(cli, ["order", "list", "--owner", "alice"])
        assert result.exit_code == 0
        assert "pending" in result.output

        result = runner.invoke(cli, ["order", "show", "--id", str(order_id), "--owner", "alice"])
        assert result.exit_code == 0, result.output
        assert "Widget" in result.output
        assert "45.00" in result.output

    def test_show_for_other_owner_fails(self, runner, order_id):
        result = runner.invoke(cli, ["order", "show", "--id", str(order_id), "--owner", "bob"])
        assert result.exit_code != 0
        assert "Not allowed" in result.output

    def test_status_then_cancel(self, runner, order_id, container):
        result = runner.invoke(
            cli, ["order", "status", "--id", str(order_id), "--owner", "alice", "--to", "paid"]
        )
        assert result.exit_code == 0, result.output
        assert "now paid" in result.output

        result = runner.invoke(cli, ["order", "cancel", "--id", str(order_id), "--owner", "alice"])
        assert result.exit_code == 0, result.output
        assert container.product_repo.get_by_id("P").stock_qty == 10

    def test_invalid_transition(self, runner, order_id):
        result = runner.invoke(
            cli, ["order", "status", "--id", str(order_id), "--owner", "alice", "--to", "delivered"]
        )
        assert result.exit_code != 0
        assert "Cannot move order" in result.output

    def test_no_orders(self, runner):
        result = runner.invoke(cli, ["order", "list", "--owner", "nobody"])
        assert "No orders found." in result.output
