"""Navigation state: folder path stack, pane history and back handling."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from ne_engine.models.node import DIRECTORY_VARIANT, Node, find_node_by_id

logger = logging.getLogger(__name__)

DEFAULT_PANES: tuple[str, ...] = (
    "health",
    "household",
    "dashboard",
    "agenda",
    "finance",
    "cloud",
)
HOME_PANE = "dashboard"

BackHandler = Callable[[], bool]


@dataclass(frozen=True)
class Crumb:
    id: str
    title: str


@dataclass
class _RegisteredHandler:
    priority: int
    order: int
    handler: BackHandler


class NavigationController:
    """Explicitly constructed navigation state for one view session.

    Back presses are resolved in this order: registered handlers by
    descending priority (ties in registration order), the open drawer,
    the folder stack, pane history, and finally a jump to the home pane.
    """

    def __init__(
        self,
        context_root_id: Optional[str] = None,
        context_title: str = "Home",
        *,
        panes: Sequence[str] = DEFAULT_PANES,
        home_pane: str = HOME_PANE,
        history_limit: int = 10,
        directory_variant: str = DIRECTORY_VARIANT,
    ) -> None:
        if home_pane not in panes:
            raise ValueError(f"Home pane {home_pane!r} is not one of {list(panes)}")
        self.context_root_id = context_root_id
        self.context_title = context_title
        self.panes = list(panes)
        self.home_pane = home_pane
        self.current_pane = home_pane
        self.history_limit = history_limit
        self.directory_variant = directory_variant
        self.pane_history: List[str] = []
        self.path_stack: List[Crumb] = []
        self.drawer_open = False
        self._handlers: List[_RegisteredHandler] = []
        self._order = itertools.count()

    # folders

    def set_context_root(self, root_id: str, title: str = "Home") -> None:
        self.context_root_id = root_id
        self.context_title = title
        self.path_stack.clear()

    def navigate_into(self, node_id: str, title: str) -> None:
        self.path_stack.append(Crumb(node_id, title))

    def navigate_up(self) -> bool:
        if not self.path_stack:
            return False
        self.path_stack.pop()
        return True

    def navigate_to_root(self) -> None:
        self.path_stack.clear()

    def navigate_to_index(self, index: int) -> None:
        """Keep crumbs up to and including ``index``; -1 returns to the root."""
        if index < -1 or index >= len(self.path_stack):
            raise IndexError(f"Breadcrumb index out of range: {index}")
        del self.path_stack[index + 1:]

    @property
    def current_folder_id(self) -> Optional[str]:
        if self.path_stack:
            return self.path_stack[-1].id
        return self.context_root_id

    @property
    def current_title(self) -> str:
        if self.path_stack:
            return self.path_stack[-1].title
        return self.context_title

    def breadcrumbs(self) -> List[Crumb]:
        root = [Crumb(self.context_root_id, self.context_title)] if self.context_root_id else []
        return root + list(self.path_stack)

    def current_view_node(self, tree: Optional[Node]) -> Optional[Node]:
        """The navigated folder presented as a directory view."""
        if tree is None:
            return None
        target = find_node_by_id(tree, self.current_folder_id) if self.current_folder_id else None
        if target is None:
            if self.path_stack:
                logger.warning(
                    "Folder %s is no longer in the tree; showing the root",
                    self.current_folder_id,
                )
            target = tree
        return target.with_variant(self.directory_variant)

    # panes

    def navigate_to_pane(self, pane: str) -> bool:
        if pane not in self.panes:
            logger.warning("Unknown pane %r", pane)
            return False
        self.drawer_open = False
        if pane == self.current_pane:
            return False
        self.pane_history.append(self.current_pane)
        del self.pane_history[: -self.history_limit]
        self.current_pane = pane
        return True

    def open_drawer(self) -> None:
        self.drawer_open = True

    def close_drawer(self) -> None:
        self.drawer_open = False

    # back handling

    def register_back_handler(self, priority: int, handler: BackHandler) -> Callable[[], None]:
        """Register ``handler``; returns a callable that unregisters it."""
        entry = _RegisteredHandler(priority, next(self._order), handler)
        self._handlers.append(entry)

        def unregister() -> None:
            if entry in self._handlers:
                self._handlers.remove(entry)

        return unregister

    def can_go_back(self) -> bool:
        return bool(
            self._handlers
            or self.drawer_open
            or self.path_stack
            or self.pane_history
            or self.current_pane != self.home_pane
        )

    def handle_back(self) -> bool:
        """Resolve one back press; False when there is nothing to go back to."""
        for entry in sorted(self._handlers, key=lambda e: (-e.priority, e.order)):
            if entry.handler():
                return True
        if self.drawer_open:
            self.drawer_open = False
            return True
        if self.navigate_up():
            return True
        if self.pane_history:
            self.current_pane = self.pane_history.pop()
            return True
        if self.current_pane != self.home_pane:
            self.current_pane = self.home_pane
            return True
        return False
