"""
Tessera sessions - Cross-device token exchange.

A device holding a ticket asks for a short token, shows it to the user, and
a second device types it in to obtain the same ticket. Tokens live in the
ticket family as ``{token: {"ticket": ticket}}`` for five minutes.

Tokens are drawn from ``random`` (not ``secrets``), are not checked for
collisions and are not deleted on exchange; the short TTL bounds replay.
"""

from __future__ import annotations

import logging
import random
import string

from tessera.store.core import RecordStore

from .faults import InvalidTicketFault, InvalidTokenFault
from .tickets import ID_COLUMN

logger = logging.getLogger("tessera.sessions.tokens")

TICKET_COLUMN = "ticket"
TOKEN_ALPHABET = string.ascii_lowercase
TOKEN_LENGTH = 8
TOKEN_TTL = 300  # 5 minutes


def generate_token(length: int = TOKEN_LENGTH, alphabet: str = TOKEN_ALPHABET) -> str:
    """Return a human-typable token, one uniform choice per character."""
    return "".join(random.choice(alphabet) for _ in range(length))


class TokenExchange:
    """
    Creates and redeems relay tokens for existing tickets.

    Args:
        family: Ticket family handle (tokens share it with tickets)
        ttl: Token lifetime in seconds
        length: Token length
        alphabet: Token characters
    """

    def __init__(
        self,
        family: RecordStore,
        ttl: int = TOKEN_TTL,
        length: int = TOKEN_LENGTH,
        alphabet: str = TOKEN_ALPHABET,
    ):
        self.family = family
        self.ttl = ttl
        self.length = length
        self.alphabet = alphabet

    async def create_token(self, ticket: str) -> str:
        """
        Create a token relaying to ``ticket``.

        Raises:
            InvalidTicketFault: Ticket unknown or expired
        """
        row = await self.family.get(ticket, [ID_COLUMN])
        if not row or ID_COLUMN not in row:
            raise InvalidTicketFault(ticket)

        token = generate_token(self.length, self.alphabet)
        await self.family.set({token: {TICKET_COLUMN: ticket}}, ttl=self.ttl)
        logger.debug(f"Issued token {token[:2]}... for ticket {ticket[:6]}...")
        return token

    async def exchange_token(self, token: str) -> str:
        """
        Redeem ``token`` for the ticket it was created from.

        The token stays readable until its TTL elapses, so repeated
        exchanges return the same ticket. The ticket's own expiry is not
        re-checked here.

        Raises:
            InvalidTokenFault: Token unknown or expired
        """
        row = await self.family.get(token, [TICKET_COLUMN])
        if not row or TICKET_COLUMN not in row:
            raise InvalidTokenFault(token)
        return row[TICKET_COLUMN]
