"""
Tessera sessions - ASGI adapter.

Reads a ticket from a request header and attaches the ticket's session to
``scope["session"]`` before calling the wrapped application.

Usage::

    app = TicketSessionMiddleware(app, manager, columns=["name", "role"])
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, MutableMapping, Optional, Sequence

from .manager import TicketSessionManager

Scope = MutableMapping[str, Any]
ASGIApp = Callable[[Scope, Callable, Callable], Awaitable[None]]


class TicketSessionMiddleware:
    """
    Pure ASGI middleware.

    - No header: request passes through untouched
    - Unknown or expired ticket: request passes through untouched
    - Resolved ticket: ``scope["session"]`` holds the session attributes
      plus ``id`` (user id) and ``ticket``
    - Store faults propagate to the server

    Args:
        app: Wrapped ASGI application
        manager: Ticket session manager
        header_name: Header carrying the ticket (defaults to the manager config)
        columns: Session attributes to load (None loads all)
    """

    def __init__(
        self,
        app: ASGIApp,
        manager: TicketSessionManager,
        header_name: Optional[str] = None,
        columns: Optional[Sequence[str]] = None,
    ):
        self.app = app
        self.manager = manager
        self.header_name = header_name or manager.config.header_name
        self.columns = list(columns) if columns is not None else None
        self._header_key = self.header_name.lower().encode("latin-1")

    def extract(self, scope: Scope) -> Optional[str]:
        """Return the ticket header value, if present."""
        for name, value in scope.get("headers", ()):
            if name.lower() == self._header_key:
                return value.decode("latin-1")
        return None

    async def __call__(self, scope: Scope, receive: Callable, send: Callable) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        ticket = self.extract(scope)
        if ticket:
            row = await self.manager.get_ticket_session(ticket, self.columns)
            if row is not None:
                row["ticket"] = ticket
                scope["session"] = row

        await self.app(scope, receive, send)
