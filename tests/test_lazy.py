"""
Tests for deferred payload values.
"""

import asyncio

from billing.lazy import LazyProp, lazy, parse_partial_header, resolve_props


async def test_full_load_skips_lazy_values():
    calls = []

    def expensive():
        calls.append("expensive")
        return 1

    props = {"plain": "a", "deferred": lambda: "b", "lazy": lazy(expensive)}

    resolved = await resolve_props(props)

    assert resolved == {"plain": "a", "deferred": "b"}
    assert calls == []


async def test_partial_load_includes_requested_lazy_values():
    async def balance():
        return {"raw": 0}

    props = {"plain": "a", "deferred": lambda: "b", "balance": lazy(balance)}

    resolved = await resolve_props(props, only=["balance", "plain"])

    assert resolved == {"plain": "a", "balance": {"raw": 0}}


async def test_async_values_run_concurrently():
    started = asyncio.Event()

    async def first():
        await asyncio.wait_for(started.wait(), timeout=1)
        return 1

    async def second():
        started.set()
        return 2

    resolved = await resolve_props({"first": first, "second": second})

    assert resolved == {"first": 1, "second": 2}


async def test_key_order_is_kept():
    resolved = await resolve_props({"b": 1, "a": lambda: 2, "c": 3})
    assert list(resolved) == ["b", "a", "c"]


def test_parse_partial_header():
    assert parse_partial_header("balance, invoices") == ["balance", "invoices"]
    assert parse_partial_header("") is None
    assert parse_partial_header(None) is None
    assert parse_partial_header(" , ") is None


def test_lazy_helper():
    prop = lazy(lambda: 1)
    assert isinstance(prop, LazyProp)
