"""
Tessera sessions - Ticket issuance and resolution.

A ticket is 24 random bytes, standard base64 (32 characters, may contain
``+``, ``/`` and ``=``), stored in the ticket family as ``{ticket: {"id": user_id}}``
with a TTL. Uniqueness is enforced by check-then-write with a bounded retry
on collision; there is no storage-level constraint.
"""

from __future__ import annotations

import base64
import logging
import secrets
from typing import Optional

from tessera.store.core import RecordStore

from .faults import TicketRetryExhaustedFault

logger = logging.getLogger("tessera.sessions.tickets")

TICKET_BYTES = 24
ID_COLUMN = "id"
DEFAULT_TICKET_TTL = 60 * 60 * 24 * 30  # 30 days
DEFAULT_MAX_ATTEMPTS = 5


def generate_ticket() -> str:
    """Return a fresh 32-character ticket candidate."""
    return base64.b64encode(secrets.token_bytes(TICKET_BYTES)).decode()


class TicketManager:
    """
    Issues tickets bound to user ids and resolves them back.

    Args:
        family: Ticket family handle
        expire: Default ticket TTL in seconds
        max_attempts: Candidates tried before giving up on collisions
    """

    def __init__(
        self,
        family: RecordStore,
        expire: int = DEFAULT_TICKET_TTL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.family = family
        self.expire = expire
        self.max_attempts = max_attempts

    async def create_ticket(self, user_id: str, ttl: Optional[int] = None) -> str:
        """
        Issue a new ticket for ``user_id``.

        Args:
            user_id: Application-level user identifier
            ttl: TTL override in seconds (defaults to ``expire``)

        Returns:
            The new ticket

        Raises:
            TicketRetryExhaustedFault: Every candidate collided
            StoreFault: Read or write failed (not retried)
            ValueError: ``ttl`` is not a positive number of seconds
        """
        if ttl is None:
            ttl = self.expire
        elif ttl <= 0:
            raise ValueError(f"Ticket TTL must be positive, got {ttl}")

        for attempt in range(1, self.max_attempts + 1):
            ticket = generate_ticket()
            existing = await self.family.get(ticket, [ID_COLUMN])
            if existing is not None:
                logger.warning(f"Ticket collision on attempt {attempt}, regenerating")
                continue

            await self.family.set({ticket: {ID_COLUMN: user_id}}, ttl=ttl)
            logger.debug(f"Issued ticket {ticket[:6]}... for user {user_id}")
            return ticket

        raise TicketRetryExhaustedFault(self.max_attempts)

    async def get_id(self, ticket: str) -> Optional[str]:
        """Resolve a ticket to its user id; None if unknown or expired."""
        row = await self.family.get(ticket, [ID_COLUMN])
        if not row:
            return None
        return row.get(ID_COLUMN)
