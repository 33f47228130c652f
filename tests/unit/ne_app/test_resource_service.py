"""Tests for ResourceService queries and optimistic mutations."""

from __future__ import annotations

import asyncio

import pytest

from ne_app.services.memory_store import InMemoryResourceStore
from ne_app.services.query_cache import ResourceKeys
from ne_app.services.resource_service import ResourceService
from ne_common.errors import (
    ConcurrentMutationError,
    DataUnavailableError,
    InvalidMoveError,
    MutationFailureError,
)
from ne_engine.models.resource import ResourceStatus


pytestmark = pytest.mark.unit_app


@pytest.fixture
def service(budget_store) -> ResourceService:
    return ResourceService(budget_store)


def _cached_status(service: ResourceService, resource_id: str) -> ResourceStatus:
    return service.cache.find_record(resource_id, include_stale=True).status


class TestQueries:
    def test_fetch_tree_returns_root_and_subtree(self, service) -> None:
        records = asyncio.run(service.fetch_tree("notes"))
        assert [r.id for r in records] == ["notes", "receipt"]
        assert service.cache.peek(ResourceKeys.tree("notes")) is records

    def test_missing_root_yields_no_records(self, service) -> None:
        assert asyncio.run(service.fetch_tree("ghost")) == []

    def test_store_failure_becomes_data_unavailable(self) -> None:
        class BrokenStore(InMemoryResourceStore):
            async def get(self, resource_id):
                raise TimeoutError("database timed out")

        service = ResourceService(BrokenStore())
        with pytest.raises(DataUnavailableError) as excinfo:
            asyncio.run(service.fetch_tree("budget"))
        assert isinstance(excinfo.value.__cause__, TimeoutError)

    def test_get_and_list_children(self, service) -> None:
        assert asyncio.run(service.get("fuel")).title == "Fuel"
        children = asyncio.run(service.list_children("notes"))
        assert [r.id for r in children] == ["receipt"]


class TestCycleStatus:
    def test_cycles_through_all_statuses(self, service) -> None:
        seen = []
        for _ in range(3):
            seen.append(asyncio.run(service.cycle_status("fuel")).status)
        assert seen == [
            ResourceStatus.COMPLETED,
            ResourceStatus.ARCHIVED,
            ResourceStatus.ACTIVE,
        ]

    def test_success_marks_views_stale(self, service) -> None:
        async def scenario():
            await service.fetch_tree("budget")
            await service.cycle_status("fuel")

        asyncio.run(scenario())
        assert service.cache.is_stale(ResourceKeys.tree("budget"))
        assert _cached_status(service, "fuel") is ResourceStatus.COMPLETED

    def test_failure_restores_exact_cached_values(self, service, budget_store) -> None:
        async def scenario():
            records = await service.fetch_tree("budget")
            budget_store.fail_next_write()
            with pytest.raises(MutationFailureError):
                await service.cycle_status("fuel")
            return records

        records = asyncio.run(scenario())
        assert service.cache.peek(ResourceKeys.tree("budget")) is records
        assert _cached_status(service, "fuel") is ResourceStatus.ACTIVE
        assert service.cache.is_stale(ResourceKeys.tree("budget"))
        assert not service.is_in_flight("fuel")

    def test_optimistic_value_visible_while_in_flight(self, budget_resources) -> None:
        service = ResourceService(InMemoryResourceStore(budget_resources, latency=0.01))

        async def scenario():
            await service.fetch_tree("budget")
            task = asyncio.create_task(service.cycle_status("fuel"))
            await asyncio.sleep(0)
            during = _cached_status(service, "fuel")
            in_flight = service.is_in_flight("fuel")
            with pytest.raises(ConcurrentMutationError):
                await service.cycle_status("fuel")
            await task
            return during, in_flight

        during, in_flight = asyncio.run(scenario())
        assert during is ResourceStatus.COMPLETED
        assert in_flight
        assert asyncio.run(service.get("fuel")).status is ResourceStatus.COMPLETED

    def test_overlapping_failures_do_not_leak_optimistic_values(self, budget_resources) -> None:
        store = InMemoryResourceStore(budget_resources, latency=0.01)
        service = ResourceService(store)

        async def scenario():
            await service.fetch_tree("budget")
            store.fail_next_write()
            store.fail_next_write()
            first = asyncio.create_task(service.cycle_status("fuel"))
            await asyncio.sleep(0.001)
            second = asyncio.create_task(service.cycle_status("bakery"))
            return await asyncio.gather(first, second, return_exceptions=True)

        outcomes = asyncio.run(scenario())
        assert all(isinstance(outcome, MutationFailureError) for outcome in outcomes)
        assert _cached_status(service, "fuel") is ResourceStatus.ACTIVE
        assert _cached_status(service, "bakery") is ResourceStatus.ACTIVE
        assert asyncio.run(service.cycle_status("fuel")).status is ResourceStatus.COMPLETED

    def test_stale_cached_copy_is_not_trusted(self, service, budget_store) -> None:
        async def scenario():
            await service.fetch_tree("budget")
            await budget_store.update("fuel", {"status": ResourceStatus.COMPLETED})
            service.cache.invalidate()
            return await service.cycle_status("fuel")

        assert asyncio.run(scenario()).status is ResourceStatus.ARCHIVED

    def test_unknown_record_fails(self, service) -> None:
        with pytest.raises(MutationFailureError):
            asyncio.run(service.cycle_status("ghost"))


class TestFieldUpdates:
    def test_update_field_merges_metadata(self, service) -> None:
        updated = asyncio.run(service.update_field("fuel", "amount", 25))
        assert updated.metadata == {"category": "Gas", "amount": 25}

    def test_update_changes_columns(self, service) -> None:
        updated = asyncio.run(service.update("fuel", {"title": "Petrol"}))
        assert updated.title == "Petrol"

    def test_failed_update_wraps_store_error(self, service, budget_store) -> None:
        budget_store.fail_next_write(OSError("disk full"))
        with pytest.raises(MutationFailureError) as excinfo:
            asyncio.run(service.update_field("fuel", "amount", 1))
        assert excinfo.value.context["operation"] == "update_field"
        assert asyncio.run(budget_store.get("fuel")).metadata["amount"] == 20


class TestMove:
    def test_move_repairs_descendant_paths(self, service, budget_store) -> None:
        moved = asyncio.run(service.move("notes", "groceries"))
        assert moved.parent_id == "groceries"
        assert moved.path == "root.budget.groceries.notes"
        receipt = asyncio.run(budget_store.get("receipt"))
        assert receipt.path == "root.budget.groceries.notes.receipt"
        assert receipt.parent_id == "notes"

    @pytest.mark.parametrize(
        "resource_id, parent_id",
        [("notes", "notes"), ("budget", "receipt"), ("notes", "receipt"), ("fuel", "ghost")],
    )
    def test_invalid_moves_are_rejected(self, service, budget_store, resource_id, parent_id) -> None:
        before = budget_store.dump()
        with pytest.raises(InvalidMoveError):
            asyncio.run(service.move(resource_id, parent_id))
        assert budget_store.dump() == before


    def test_failed_descendant_repair_undoes_the_move(self, budget_resources) -> None:
        class FlakyStore(InMemoryResourceStore):
            async def update(self, resource_id, changes):
                if resource_id == "receipt" and "path" in changes and not self.failed:
                    self.failed = True
                    raise ConnectionError("connection reset")
                return await super().update(resource_id, changes)

        store = FlakyStore(budget_resources)
        store.failed = False
        service = ResourceService(store)
        before = {r.id: (r.parent_id, r.path) for r in asyncio.run(store.fetch_subtree("root"))}

        with pytest.raises(MutationFailureError) as excinfo:
            asyncio.run(service.move("notes", "groceries"))

        assert excinfo.value.context["failed_id"] == "receipt"
        assert excinfo.value.context["reverted"] is True
        after = {r.id: (r.parent_id, r.path) for r in asyncio.run(store.fetch_subtree("root"))}
        assert after == before


class TestCreateAndDelete:
    def test_create_computes_path(self, service) -> None:
        created = asyncio.run(
            service.create("notes", "Memo", resource_type="document", resource_id="memo-1")
        )
        assert created.path == "root.budget.notes.memo_1"
        assert created.type == "document"

    def test_create_top_level_and_generated_id(self, service) -> None:
        created = asyncio.run(service.create(None, "Inbox"))
        assert created.parent_id is None
        assert created.path.startswith("root.")
        assert len(created.id) == 36

    def test_create_with_blank_title_fails_cleanly(self, service, budget_store) -> None:
        before = budget_store.dump()
        with pytest.raises(MutationFailureError) as excinfo:
            asyncio.run(service.create("budget", "   "))
        assert excinfo.value.context["parent_id"] == "budget"
        assert budget_store.dump() == before

    def test_create_under_missing_parent_fails(self, service) -> None:
        with pytest.raises(MutationFailureError):
            asyncio.run(service.create("ghost", "Orphan"))

    def test_create_invalidates_views(self, service) -> None:
        async def scenario():
            await service.fetch_tree("budget")
            await service.create("budget", "Rent")

        asyncio.run(scenario())
        assert service.cache.is_stale(ResourceKeys.tree("budget"))

    def test_soft_delete_cascades_children_first(self, service, budget_store) -> None:
        deleted = asyncio.run(service.soft_delete("notes"))
        assert deleted == ["receipt", "notes"]
        assert asyncio.run(budget_store.get("receipt")) is None
        records = asyncio.run(service.fetch_tree("budget"))
        assert "notes" not in {r.id for r in records}
