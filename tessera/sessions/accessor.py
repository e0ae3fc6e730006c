"""
Tessera sessions - Session attribute access.

Session rows live in the store family keyed by user id, so every ticket of
a user shares one attribute set. No TTL is applied to session rows.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from tessera.store.core import RecordStore, Row

from .tickets import ID_COLUMN, TicketManager


class SessionAccessor:
    """Reads and writes session attributes, directly or through a ticket."""

    def __init__(self, family: RecordStore, tickets: TicketManager):
        self.family = family
        self.tickets = tickets

    async def set_session(self, user_id: str, attributes: Mapping[str, Any]) -> None:
        """Write the named attributes; other attributes are left untouched."""
        await self.family.set({user_id: dict(attributes)})

    async def get_session(self, user_id: str, columns: Optional[Sequence[str]] = None) -> Optional[Row]:
        """Read the named attributes; None if the user has no session row."""
        return await self.family.get(user_id, columns)

    async def get_ticket_session(self, ticket: str, columns: Optional[Sequence[str]] = None) -> Optional[Row]:
        """
        Resolve a ticket and read its user's session.

        Returns:
            None if the ticket does not resolve (session family is not read).
            Otherwise the session attributes merged with ``{"id": user_id}``;
            a user without a session row still yields ``{"id": user_id}``.
        """
        user_id = await self.tickets.get_id(ticket)
        if user_id is None:
            return None

        row = await self.family.get(user_id, columns)
        session = dict(row or {})
        session[ID_COLUMN] = user_id
        return session
