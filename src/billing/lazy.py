"""
Deferred payload values.

The dashboard payload mixes plain values with two kinds of deferred ones:

- callables (sync or async): evaluated when the payload is serialized,
- LazyProp: only evaluated when the client asks for that key explicitly
  (partial reload), otherwise left out of the response.

resolve_props() turns such a payload into plain JSON-ready data, running
all deferred coroutines concurrently.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Union

Deferred = Callable[[], Union[Any, Awaitable[Any]]]


class LazyProp:
    """A value that is only computed when explicitly requested."""

    def __init__(self, callback: Deferred):
        self.callback = callback

    def __repr__(self) -> str:
        return f"LazyProp({getattr(self.callback, '__name__', self.callback)!r})"


def lazy(callback: Deferred) -> LazyProp:
    return LazyProp(callback)


async def _evaluate(value: Any) -> Any:
    if isinstance(value, LazyProp):
        value = value.callback
    if callable(value):
        value = value()
    if inspect.isawaitable(value):
        value = await value
    return value


async def resolve_props(
    props: Dict[str, Any],
    only: Optional[Iterable[str]] = None
) -> Dict[str, Any]:
    """
    Evaluate deferred values of a payload.

    Args:
        props: Payload as built by FrontendState.current()
        only: Keys requested by a partial reload; None for a full load

    Returns:
        New dict with every value resolved, in the original key order
    """
    if only is not None:
        requested = set(only)
        selected = {k: v for k, v in props.items() if k in requested}
    else:
        selected = {k: v for k, v in props.items() if not isinstance(v, LazyProp)}

    keys = list(selected)
    values = await asyncio.gather(*(_evaluate(selected[k]) for k in keys))
    return dict(zip(keys, values))


def parse_partial_header(value: Optional[str]) -> Optional[list[str]]:
    """"balance, invoices" -> ["balance", "invoices"]; missing/empty header -> None."""
    if not value:
        return None
    keys = [key.strip() for key in value.split(",") if key.strip()]
    return keys or None
