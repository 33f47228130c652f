from collections import defaultdict
from typing import Any, Callable, List, Optional

import pytest
from rich.console import Console
from rich.table import Table

from ne_app.services.memory_store import InMemoryResourceStore
from ne_engine.models.resource import Resource

KNOWN_MARKERS = {
    "unit_common",
    "unit_engine",
    "unit_analytics",
    "unit_app",
    "unit_ui",
}


ResourceFactory = Callable[..., Resource]


@pytest.fixture
def make_resource() -> ResourceFactory:
    """Factory for resources with a readable default title."""

    def _make(
        resource_id: str,
        parent_id: Optional[str] = None,
        *,
        title: Optional[str] = None,
        **fields: Any,
    ) -> Resource:
        return Resource(
            id=resource_id,
            parent_id=parent_id,
            title=title or resource_id.replace("_", " ").title(),
            **fields,
        )

    return _make


@pytest.fixture
def budget_resources(make_resource: ResourceFactory) -> List[Resource]:
    """A budget folder with three expenses and a nested notes folder."""
    return [
        make_resource("budget", type="folder", title="Budget"),
        make_resource(
            "groceries",
            "budget",
            title="Groceries",
            metadata={"category": "Food", "amount": 10},
        ),
        make_resource(
            "bakery",
            "budget",
            title="Bakery",
            metadata={"category": "Food", "amount": 5},
        ),
        make_resource(
            "fuel",
            "budget",
            title="Fuel",
            metadata={"category": "Gas", "amount": 20},
        ),
        make_resource("notes", "budget", type="folder", title="Notes"),
        make_resource("receipt", "notes", type="document", title="Receipt"),
    ]


@pytest.fixture
def budget_store(budget_resources: List[Resource]) -> InMemoryResourceStore:
    return InMemoryResourceStore(budget_resources)


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    """Print statistics by marker at the end of the test session."""
    _ = (exitstatus, config)
    marker_stats = defaultdict(
        lambda: {"passed": 0, "failed": 0, "skipped": 0, "total": 0, "duration": 0.0}
    )

    for outcome in ["passed", "failed", "skipped"]:
        for report in terminalreporter.stats.get(outcome, []):
            if report.when == "call" or (report.when == "setup" and report.outcome == "skipped"):
                duration = getattr(report, "duration", 0.0)
                for marker in KNOWN_MARKERS:
                    if marker in report.keywords:
                        stats = marker_stats[marker]
                        stats[outcome] += 1
                        stats["total"] += 1
                        stats["duration"] += duration

    if not marker_stats:
        return

    table = Table(title="Test Statistics by Marker", show_header=True, header_style="bold magenta")
    table.add_column("Marker", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Passed", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Skipped", justify="right", style="yellow")
    table.add_column("Duration (s)", justify="right", style="blue")

    for marker in sorted(marker_stats):
        stats = marker_stats[marker]
        table.add_row(
            marker,
            str(stats["total"]),
            str(stats["passed"]),
            str(stats["failed"]),
            str(stats["skipped"]),
            f"{stats['duration']:.2f}",
        )

    console = Console()
    console.print("\n")
    console.print(table)
