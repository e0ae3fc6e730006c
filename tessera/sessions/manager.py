"""
Tessera sessions - Ticket session manager.

The manager is the public surface. Construction schedules provisioning of
both families; every operation awaits the readiness gate first and then
delegates:

    create_ticket / get_id                 -> TicketManager
    create_token / exchange_token          -> TokenExchange
    set_session / get_session /
    get_ticket_session                     -> SessionAccessor

Lookups return None for unknown keys; token operations raise
InvalidTicketFault / InvalidTokenFault. Store faults reach only the call
that triggered them. A provisioning fault is replayed to every call.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional, Sequence, Union

from tessera.config import SessionConfig, build_session_config
from tessera.store.core import Keyspace, Row

from .accessor import SessionAccessor
from .gate import FamilyHandles, ReadinessGate, ReadyCallback, ReadyState, provision
from .tickets import TicketManager
from .tokens import TokenExchange


class TicketSessionManager:
    """
    Ticket, token and session facade over one keyspace.

    Instances are independent: two managers over different keyspaces or
    family names never share state.

    Example:
        >>> manager = TicketSessionManager(MemoryKeyspace(), {"expire": 3600})
        >>> ticket = await manager.create_ticket("100")
        >>> await manager.get_id(ticket)
        '100'
        >>> await manager.set_session("100", {"name": "test"})
        >>> token = await manager.create_token(ticket)
        >>> await manager.exchange_token(token) == ticket
        True
    """

    def __init__(
        self,
        keyspace: Keyspace,
        config: Union[SessionConfig, Mapping[str, Any], None] = None,
        *,
        logger: logging.Logger | None = None,
    ):
        if not isinstance(config, SessionConfig):
            config = build_session_config(config)
        self.config = config
        self.keyspace = keyspace
        self.logger = logger or logging.getLogger("tessera.sessions")

        self.store_family = keyspace.family(config.store_family)
        self.ticket_family = keyspace.family(config.ticket_family)

        self._gate = ReadinessGate(logger=self.logger)
        self._provision_task: Optional[asyncio.Task] = None
        self._tickets: Optional[TicketManager] = None
        self._tokens: Optional[TokenExchange] = None
        self._sessions: Optional[SessionAccessor] = None
        self._gate.on_ready(self._bind)

        try:
            self._start()
        except RuntimeError:
            # No running loop: provisioning starts with the first awaited call
            pass

    # ========================================================================
    # Readiness
    # ========================================================================

    @property
    def state(self) -> ReadyState:
        return self._gate.state

    def on_ready(self, callback: ReadyCallback) -> None:
        """
        Register a one-shot ``callback(error, handles)``.

        Fires immediately when provisioning has already been decided.
        """
        self._gate.on_ready(callback)
        if self._gate.state is ReadyState.PENDING:
            try:
                self._start()
            except RuntimeError:
                pass

    async def ready(self) -> FamilyHandles:
        """Wait until both families are provisioned."""
        self._start()
        return await self._gate.wait()

    def _start(self) -> None:
        if self._provision_task is None and self._gate.state is ReadyState.PENDING:
            loop = asyncio.get_running_loop()
            self._provision_task = loop.create_task(
                provision(self._gate, self.store_family, self.ticket_family)
            )

    def _bind(self, error, handles: Optional[FamilyHandles]) -> None:
        if error is not None:
            return
        config = self.config
        self._tickets = TicketManager(
            handles.ticket,
            expire=config.expire,
            max_attempts=config.max_ticket_attempts,
        )
        self._tokens = TokenExchange(
            handles.ticket,
            ttl=config.token_ttl,
            length=config.token_length,
            alphabet=config.token_alphabet,
        )
        self._sessions = SessionAccessor(handles.store, self._tickets)

    # ========================================================================
    # Tickets
    # ========================================================================

    async def create_ticket(self, user_id: str, ttl: Optional[int] = None) -> str:
        """Issue a ticket bound to ``user_id`` (TTL defaults to ``config.expire``)."""
        await self.ready()
        return await self._tickets.create_ticket(user_id, ttl)

    async def get_id(self, ticket: str) -> Optional[str]:
        """User id bound to ``ticket``, or None."""
        await self.ready()
        return await self._tickets.get_id(ticket)

    # ========================================================================
    # Sessions
    # ========================================================================

    async def set_session(self, user_id: str, attributes: Mapping[str, Any]) -> None:
        await self.ready()
        await self._sessions.set_session(user_id, attributes)

    async def get_session(self, user_id: str, columns: Optional[Sequence[str]] = None) -> Optional[Row]:
        await self.ready()
        return await self._sessions.get_session(user_id, columns)

    async def get_ticket_session(self, ticket: str, columns: Optional[Sequence[str]] = None) -> Optional[Row]:
        await self.ready()
        return await self._sessions.get_ticket_session(ticket, columns)

    # ========================================================================
    # Tokens
    # ========================================================================

    async def create_token(self, ticket: str) -> str:
        """Short-lived relay token for ``ticket``; raises InvalidTicketFault."""
        await self.ready()
        return await self._tokens.create_token(ticket)

    async def exchange_token(self, token: str) -> str:
        """Ticket behind ``token``; raises InvalidTokenFault."""
        await self.ready()
        return await self._tokens.exchange_token(token)


def create_session_manager(
    keyspace: Keyspace,
    config: Union[SessionConfig, Mapping[str, Any], None] = None,
) -> TicketSessionManager:
    """Build a new, independently configured manager."""
    return TicketSessionManager(keyspace, config)
