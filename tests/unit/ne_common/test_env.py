"""Tests for ne_common.config.env parsing utilities."""

import pytest

from ne_common.config.env import (
    parse_bool_env,
    parse_int_env,
    parse_list_env,
)


pytestmark = pytest.mark.unit_common


class TestParseBoolEnv:
    def test_returns_none_for_none(self) -> None:
        assert parse_bool_env(None) is None

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", "on", "  true  "])
    def test_returns_true_for_truthy_values(self, value: str) -> None:
        assert parse_bool_env(value) is True

    @pytest.mark.parametrize("value", ["0", "false", "no", "off", "random", ""])
    def test_returns_false_for_other_values(self, value: str) -> None:
        assert parse_bool_env(value) is False


def test_parse_int_env() -> None:
    assert parse_int_env("42") == 42
    assert parse_int_env("  7 ") == 7
    assert parse_int_env("3.14") is None
    assert parse_int_env(None) is None


def test_parse_list_env_drops_empty_tokens() -> None:
    assert parse_list_env("#06b6d4, ,#ec4899,") == ["#06b6d4", "#ec4899"]
    assert parse_list_env(None) == []
    assert parse_list_env("") == []
