"""Tests for the navigation controller."""

from __future__ import annotations

import pytest

from ne_app.navigation import Crumb, NavigationController
from ne_engine.tree import build_tree


pytestmark = pytest.mark.unit_app


@pytest.fixture
def nav() -> NavigationController:
    return NavigationController("budget", "Budget")


class TestFolderStack:
    def test_navigate_into_and_up(self, nav) -> None:
        nav.navigate_into("notes", "Notes")
        assert nav.current_folder_id == "notes"
        assert nav.current_title == "Notes"
        assert nav.breadcrumbs() == [Crumb("budget", "Budget"), Crumb("notes", "Notes")]

        assert nav.navigate_up()
        assert nav.current_folder_id == "budget"
        assert not nav.navigate_up()

    def test_navigate_to_index(self, nav) -> None:
        for folder in ("a", "b", "c"):
            nav.navigate_into(folder, folder.upper())
        nav.navigate_to_index(0)
        assert [crumb.id for crumb in nav.path_stack] == ["a"]
        nav.navigate_to_index(-1)
        assert nav.path_stack == []
        with pytest.raises(IndexError):
            nav.navigate_to_index(3)

    def test_set_context_root_resets_stack(self, nav) -> None:
        nav.navigate_into("notes", "Notes")
        nav.set_context_root("health", "Health")
        assert nav.breadcrumbs() == [Crumb("health", "Health")]

    def test_navigate_to_root(self, nav) -> None:
        nav.navigate_into("a", "A")
        nav.navigate_into("b", "B")
        nav.navigate_to_root()
        assert nav.current_folder_id == "budget"
        assert nav.current_title == "Budget"

    def test_current_view_node(self, nav, budget_resources) -> None:
        tree = build_tree(budget_resources, "budget").root
        view = nav.current_view_node(tree)
        assert view.id == "budget"
        assert view.variant == "view_directory"
        assert tree.variant == "row_neon_group"

        nav.navigate_into("notes", "Notes")
        assert nav.current_view_node(tree).id == "notes"

        nav.navigate_into("vanished", "Gone")
        assert nav.current_view_node(tree).id == "budget"
        assert nav.current_view_node(None) is None


class TestPanes:
    def test_unknown_pane_is_refused(self, nav) -> None:
        assert not nav.navigate_to_pane("casino")
        assert nav.current_pane == "dashboard"

    def test_history_is_capped(self) -> None:
        nav = NavigationController(history_limit=2)
        for pane in ("health", "agenda", "finance", "cloud"):
            assert nav.navigate_to_pane(pane)
        assert nav.pane_history == ["agenda", "finance"]

    def test_invalid_home_pane(self) -> None:
        with pytest.raises(ValueError):
            NavigationController(home_pane="nowhere")


class TestBackHandling:
    def test_resolution_order(self, nav) -> None:
        nav.navigate_to_pane("finance")
        nav.navigate_into("notes", "Notes")
        nav.open_drawer()

        assert nav.handle_back() and not nav.drawer_open
        assert nav.handle_back() and nav.path_stack == []
        assert nav.handle_back() and nav.current_pane == "dashboard"
        assert not nav.can_go_back()
        assert not nav.handle_back()

    def test_without_history_returns_home(self, nav) -> None:
        nav.current_pane = "cloud"
        assert nav.handle_back()
        assert nav.current_pane == "dashboard"

    def test_handlers_run_by_priority(self, nav) -> None:
        calls = []

        def low():
            calls.append("low")
            return True

        def high_declines():
            calls.append("high")
            return False

        nav.register_back_handler(1, low)
        unregister = nav.register_back_handler(5, high_declines)
        nav.open_drawer()

        assert nav.handle_back()
        assert calls == ["high", "low"]
        assert nav.drawer_open

        unregister()
        unregister()
        assert nav.can_go_back()
        calls.clear()
        nav.handle_back()
        assert calls == ["low"]
