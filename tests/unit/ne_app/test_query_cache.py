"""Tests for the stale-while-revalidate query cache."""

from __future__ import annotations

import asyncio

import pytest

from ne_app.services.query_cache import QueryCache, ResourceKeys


pytestmark = pytest.mark.unit_app


def test_fetch_loads_once_until_invalidated() -> None:
    cache = QueryCache()
    calls = []

    async def loader():
        calls.append(1)
        return len(calls)

    async def scenario():
        first = await cache.fetch(ResourceKeys.tree("a"), loader)
        second = await cache.fetch(ResourceKeys.tree("a"), loader)
        assert cache.invalidate() == 1
        assert cache.is_stale(ResourceKeys.tree("a"))
        assert cache.peek(ResourceKeys.tree("a")) == 1
        third = await cache.fetch(ResourceKeys.tree("a"), loader)
        return first, second, third

    assert asyncio.run(scenario()) == (1, 1, 2)
    assert not cache.is_stale(ResourceKeys.tree("a"))


def test_invalidation_during_fetch_discards_result() -> None:
    cache = QueryCache()
    key = ResourceKeys.children("root")
    release = None

    async def slow_loader():
        await release.wait()
        return ["outdated"]

    async def scenario():
        nonlocal release
        release = asyncio.Event()
        task = asyncio.create_task(cache.fetch(key, slow_loader))
        await asyncio.sleep(0)
        cache.invalidate(ResourceKeys.ALL)
        release.set()
        return await task

    assert asyncio.run(scenario()) == ["outdated"]
    assert cache.peek(key) is None
    assert cache.discarded == 1


def test_invalidate_respects_prefix() -> None:
    cache = QueryCache()
    cache.set(ResourceKeys.tree("a"), [])
    cache.set(ResourceKeys.single("x"), None)
    cache.set(("settings",), {})

    assert cache.invalidate(("resources", "tree")) == 1
    assert cache.is_stale(ResourceKeys.tree("a"))
    assert not cache.is_stale(ResourceKeys.single("x"))
    assert cache.invalidate() == 2
    assert not cache.is_stale(("settings",))
    assert cache.keys() == [ResourceKeys.tree("a"), ResourceKeys.single("x")]


def test_patch_and_restore_exact_values(budget_resources) -> None:
    cache = QueryCache()
    tree = list(budget_resources)
    fuel = budget_resources[3]
    cache.set(ResourceKeys.tree("budget"), tree)
    cache.set(ResourceKeys.single("fuel"), fuel)
    cache.set(ResourceKeys.single("bakery"), budget_resources[2])

    snapshot = cache.patch_record("fuel", lambda r: r.model_copy(update={"title": "Petrol"}))

    assert set(snapshot) == {ResourceKeys.tree("budget"), ResourceKeys.single("fuel")}
    assert cache.find_record("fuel").title == "Petrol"
    assert cache.peek(ResourceKeys.tree("budget"))[3].title == "Petrol"
    assert fuel.title == "Fuel"

    cache.restore(snapshot)
    assert cache.peek(ResourceKeys.tree("budget")) is tree
    assert cache.peek(ResourceKeys.single("fuel")) is fuel


def test_find_record_searches_lists_and_clear() -> None:
    cache = QueryCache()
    assert cache.find_record("x") is None
    cache.clear()
    assert cache.keys() == []


@pytest.mark.parametrize("first", ["fuel", "bakery"])
def test_overlapping_patches_restore_only_their_record(budget_resources, first) -> None:
    cache = QueryCache()
    tree = list(budget_resources)
    cache.set(ResourceKeys.tree("budget"), tree)

    snapshots = {
        record_id: cache.patch_record(
            record_id, lambda r: r.model_copy(update={"title": r.title.upper()})
        )
        for record_id in ("fuel", "bakery")
    }
    second = "bakery" if first == "fuel" else "fuel"
    cache.restore(snapshots[first])

    titles = {r.id: r.title for r in cache.peek(ResourceKeys.tree("budget"))}
    assert titles[first] == first.title()
    assert titles[second] == second.upper()

    cache.restore(snapshots[second])
    restored = cache.peek(ResourceKeys.tree("budget"))
    assert [r.title for r in restored] == [r.title for r in tree]
    assert restored[2] is budget_resources[2]
    assert restored[3] is budget_resources[3]


def test_find_record_skips_stale_entries(budget_resources) -> None:
    cache = QueryCache()
    cache.set(ResourceKeys.tree("budget"), list(budget_resources))
    assert cache.find_record("fuel") is budget_resources[3]

    cache.invalidate()
    assert cache.find_record("fuel") is None
    assert cache.find_record("fuel", include_stale=True) is budget_resources[3]
