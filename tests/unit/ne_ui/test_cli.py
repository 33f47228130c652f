"""End-to-end tests for the ne CLI against a resources file."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from ne_ui import cli


pytestmark = pytest.mark.unit_ui

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path) -> Path:
    config_home = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    for name in ("NE_CONFIG_PATH", "NE_RESOURCES_PATH", "NE_CURRENCY", "NE_CHILD_ORDER", "NE_PALETTE"):
        monkeypatch.delenv(name, raising=False)
    return config_home


@pytest.fixture
def resources_file(tmp_path: Path, budget_resources) -> Path:
    path = tmp_path / "resources.json"
    path.write_text(json.dumps({"resources": [r.to_record() for r in budget_resources]}))
    return path


def _invoke(resources_file: Path, *args: str):
    return runner.invoke(cli.app, ["-r", str(resources_file), *args])


def _stored(resources_file: Path, resource_id: str) -> dict:
    records = json.loads(resources_file.read_text())["resources"]
    return next(record for record in records if record["id"] == resource_id)


class TestTreeCommand:
    def test_json_output(self, resources_file: Path) -> None:
        result = _invoke(resources_file, "tree", "budget", "--json")
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["id"] == "budget"
        assert [child["id"] for child in payload["children"]] == [
            "groceries",
            "bakery",
            "fuel",
            "notes",
        ]
        assert payload["children"][3]["children"][0]["id"] == "receipt"

    def test_title_order(self, resources_file: Path) -> None:
        result = _invoke(resources_file, "tree", "budget", "--json", "--order", "title")
        payload = json.loads(result.stdout)
        assert [child["title"] for child in payload["children"]] == [
            "Bakery",
            "Fuel",
            "Groceries",
            "Notes",
        ]

    def test_bad_order_is_usage_error(self, resources_file: Path) -> None:
        result = _invoke(resources_file, "tree", "budget", "--order", "random")
        assert result.exit_code == 2

    def test_rich_output_lists_skipped_records(self, tmp_path: Path, budget_resources, make_resource) -> None:
        records = [r.to_record() for r in budget_resources]
        records.append(make_resource("stray", "ghost", path="root.budget.ghost.stray").to_record())
        path = tmp_path / "with_orphan.json"
        path.write_text(json.dumps(records))

        result = _invoke(path, "tree", "budget")

        assert result.exit_code == 0, result.output
        assert "Budget" in result.output
        assert "Receipt" in result.output
        assert "Skipped records" in result.output
        assert "stray" in result.output

    def test_missing_root_fails(self, resources_file: Path) -> None:
        result = _invoke(resources_file, "tree", "ghost")
        assert result.exit_code == 1
        assert "Root node not found" in result.output

    def test_missing_resources_file_fails(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path / "nope.json", "tree", "budget")
        assert result.exit_code == 1
        assert "does not exist" in result.output


class TestReadCommands:
    def test_slot_with_type(self, resources_file: Path) -> None:
        result = _invoke(resources_file, "slot", "budget", "fuel", "amount", "--type", "currency")
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "$20.00"

    def test_slot_currency_override_and_default(self, resources_file: Path) -> None:
        euro = _invoke(resources_file, "slot", "budget", "fuel", "amount", "-t", "currency", "--currency", "EUR")
        assert euro.stdout.strip() == "€20.00"
        fallback = _invoke(resources_file, "slot", "budget", "fuel", "badge", "--default", "none")
        assert fallback.stdout.strip() == "none"

    def test_missing_slot_exits_nonzero(self, resources_file: Path) -> None:
        result = _invoke(resources_file, "slot", "budget", "fuel", "badge")
        assert result.exit_code == 1

    def test_unknown_node_exits_nonzero(self, resources_file: Path) -> None:
        result = _invoke(resources_file, "slot", "budget", "ghost", "headline")
        assert result.exit_code == 1
        assert "not part of tree" in result.output

    def test_aggregate_json(self, resources_file: Path) -> None:
        result = _invoke(
            resources_file, "aggregate", "budget", "--target", "amount", "--group-by", "category", "--json"
        )
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["total"] == 35
        assert [item["label"] for item in payload["items"]] == ["Gas", "Food", "Other"]
        assert payload["nodeCount"] == 4

    def test_aggregate_table_with_source(self, resources_file: Path) -> None:
        result = _invoke(resources_file, "aggregate", "budget", "notes", "-k", "amount", "-g", "category", "--source", "budget")
        assert result.exit_code == 0, result.output
        assert "Gas" in result.output
        assert "not found" not in result.output

    def test_aggregate_empty_and_bad_operation(self, resources_file: Path) -> None:
        empty = _invoke(resources_file, "aggregate", "budget", "fuel", "-k", "amount")
        assert empty.exit_code == 0
        assert "Nothing to aggregate" in empty.output
        bad = _invoke(resources_file, "aggregate", "budget", "-k", "amount", "--op", "median")
        assert bad.exit_code == 2

    def test_show_navigates_into_folders(self, resources_file: Path) -> None:
        result = _invoke(resources_file, "show", "budget", "--into", "notes")
        assert result.exit_code == 0, result.output
        assert "Budget / Notes" in result.output
        assert "Receipt" in result.output


class TestDispatchCommand:
    def test_toggle_status_is_persisted(self, resources_file: Path) -> None:
        result = _invoke(resources_file, "dispatch", "budget", "fuel", "toggle_status")
        assert result.exit_code == 0, result.output
        assert "toggle_status applied to fuel" in result.output
        assert _stored(resources_file, "fuel")["status"] == "completed"

    def test_update_field_json(self, resources_file: Path) -> None:
        result = _invoke(
            resources_file,
            "dispatch",
            "budget",
            "fuel",
            "update_field",
            "--target",
            "amount",
            "--payload",
            "42",
            "--json",
        )
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["status"] == "applied"
        assert _stored(resources_file, "fuel")["metadata"]["amount"] == 42

    def test_unknown_action_changes_nothing(self, resources_file: Path) -> None:
        before = resources_file.read_text()
        result = _invoke(resources_file, "dispatch", "budget", "fuel", "explode")
        assert result.exit_code == 1
        assert "ignored" in result.output
        assert resources_file.read_text() == before

    def test_invalid_payload_is_usage_error(self, resources_file: Path) -> None:
        result = _invoke(resources_file, "dispatch", "budget", "fuel", "update_field", "--payload", "{oops")
        assert result.exit_code == 2


class TestConfigCommands:
    def test_show_defaults(self, resources_file: Path) -> None:
        result = _invoke(resources_file, "config", "show")
        assert result.exit_code == 0, result.output
        assert "built-in defaults" in result.output
        assert "USD" in result.output

    def test_init_then_show(self, resources_file: Path, isolated_env: Path) -> None:
        init = _invoke(resources_file, "config", "init")
        assert init.exit_code == 0, init.output
        target = isolated_env / "ne" / "config.yaml"
        assert target.exists()

        again = _invoke(resources_file, "config", "init")
        assert again.exit_code == 1

        shown = _invoke(resources_file, "config", "show", "--yaml")
        assert "child_order: input" in shown.stdout

    def test_env_override_and_invalid_file(self, resources_file: Path, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("NE_CURRENCY", "gbp")
        shown = _invoke(resources_file, "config", "show")
        assert "GBP" in shown.output

        broken = tmp_path / "broken.yaml"
        broken.write_text("child_order: sideways\n")
        result = runner.invoke(cli.app, ["-c", str(broken), "config", "show"])
        assert result.exit_code == 1
