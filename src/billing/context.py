"""Request-side inputs of the billing state assembler."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

from core.models import PortalUser


class RouteResolver(Protocol):
    """Named routes of the host application."""

    def has(self, name: str) -> bool:
        ...

    def url_for(self, name: str, **params: Any) -> str:
        ...


class NullRouteResolver:
    """Resolver for contexts without routes (CLI, tests)."""

    def has(self, name: str) -> bool:
        return False

    def url_for(self, name: str, **params: Any) -> str:
        raise LookupError(f"Route [{name}] not defined.")


@dataclass
class PortalRequest:
    """
    What the assembler needs to know about the current HTTP request.

    Attributes:
        user: Authenticated user viewing the portal
        path: URL path of the portal page (base of pagination links)
        query: Query string parameters (message, checkout, cursor...)
        routes: Named route resolver
    """
    user: PortalUser
    path: str = "/"
    query: Dict[str, str] = field(default_factory=dict)
    routes: RouteResolver = field(default_factory=NullRouteResolver)

    def input(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.query.get(key, default)
