"""
Cursor pagination over Stripe list endpoints.

Stripe paginates with starting_after / ending_before object IDs. The
portal exposes those as opaque cursors (base64 JSON) so the dashboard can
move back and forth through paid invoices with plain links.
"""

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode

from loguru import logger


@dataclass(frozen=True)
class Cursor:
    """Position in a list: the edge object ID and the direction to move."""
    id: str
    points_to_next_items: bool = True

    def encode(self) -> str:
        payload = json.dumps({"id": self.id, "_pointsToNextItems": self.points_to_next_items})
        return base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")

    @classmethod
    def decode(cls, encoded: Optional[str]) -> Optional["Cursor"]:
        """Decode a cursor from a query string; garbage yields None (first page)."""
        if not encoded:
            return None
        try:
            padded = encoded + "=" * (-len(encoded) % 4)
            data = json.loads(base64.urlsafe_b64decode(padded.encode()))
            return cls(id=str(data["id"]), points_to_next_items=bool(data.get("_pointsToNextItems", True)))
        except (binascii.Error, ValueError, KeyError, TypeError) as e:
            logger.debug(f"Ignoring invalid cursor {encoded!r}: {e}")
            return None


@dataclass
class CursorPage:
    """One page of items plus the cursors around it."""
    items: List[Any]
    per_page: int
    path: str
    next_cursor: Optional[Cursor] = None
    prev_cursor: Optional[Cursor] = None
    query: Dict[str, str] = field(default_factory=dict)
    cursor_name: str = "cursor"

    def through(self, transform: Callable[[Any], Any]) -> "CursorPage":
        """Map every item, keeping the pagination state."""
        self.items = [transform(item) for item in self.items]
        return self

    def url(self, cursor: Optional[Cursor]) -> Optional[str]:
        if cursor is None:
            return None
        params = {k: v for k, v in self.query.items() if k != self.cursor_name}
        params[self.cursor_name] = cursor.encode()
        return f"{self.path}?{urlencode(params)}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.items,
            "path": self.path,
            "per_page": self.per_page,
            "next_cursor": self.next_cursor.encode() if self.next_cursor else None,
            "next_page_url": self.url(self.next_cursor),
            "prev_cursor": self.prev_cursor.encode() if self.prev_cursor else None,
            "prev_page_url": self.url(self.prev_cursor),
        }


def cursor_paginate(
    fetch: Callable[..., List[Any]],
    per_page: int,
    cursor: Optional[Cursor],
    path: str,
    query: Optional[Dict[str, str]] = None,
) -> CursorPage:
    """
    Fetch one page through a Stripe list call.

    One extra item is requested to know whether another page exists in the
    direction of travel. Stripe returns items newest first in both
    directions; when moving backwards the extra item is the first one.

    Args:
        fetch: Callable taking Stripe list parameters, returning the items
        per_page: Page size
        cursor: Current cursor (None for the first page)
        path: URL path of the page, used to build next/prev links
        query: Current query parameters, kept in the links
    """
    params: Dict[str, Any] = {"limit": per_page + 1}
    if cursor is not None:
        key = "starting_after" if cursor.points_to_next_items else "ending_before"
        params[key] = cursor.id

    items = list(fetch(**params))
    has_more = len(items) > per_page

    if cursor is not None and not cursor.points_to_next_items:
        items = items[-per_page:] if has_more else items
        has_next, has_prev = True, has_more
    else:
        items = items[:per_page]
        has_next, has_prev = has_more, cursor is not None

    next_cursor = prev_cursor = None
    if items:
        if has_next:
            next_cursor = Cursor(id=items[-1]["id"], points_to_next_items=True)
        if has_prev:
            prev_cursor = Cursor(id=items[0]["id"], points_to_next_items=False)

    return CursorPage(
        items=items,
        per_page=per_page,
        path=path,
        next_cursor=next_cursor,
        prev_cursor=prev_cursor,
        query=dict(query or {}),
    )
