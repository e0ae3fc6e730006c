"""
Tessera sessions - Readiness gate.

The gate decides once whether the two backing families are usable and
buffers every caller until then:

    PENDING --(both families checked)--> READY(handles)
    PENDING --(existence check failed)--> FAILED(fault)

READY and FAILED are terminal. Listeners registered while PENDING are
drained exactly once, in registration order, with the same outcome.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from tessera.store.core import DEFAULT_SCHEMA, FamilySchema, RecordStore
from tessera.store.faults import FamilyNotFoundFault

from .faults import GateAlreadyResolvedFault, ProvisioningFault

logger = logging.getLogger("tessera.sessions.gate")

# Reserved row key read to probe family existence
SENTINEL_KEY = "_"

ReadyCallback = Callable[[Optional[BaseException], Optional["FamilyHandles"]], None]


class ReadyState(str, Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class FamilyHandles:
    """Provisioned family handles."""
    store: RecordStore
    ticket: RecordStore


class ReadinessGate:
    """
    Tri-state readiness with a one-shot listener queue.

    Example:
        >>> gate = ReadinessGate()
        >>> gate.on_ready(lambda err, handles: print(err, handles))
        >>> gate.resolve(FamilyHandles(store=a, ticket=b))   # listener fires
        >>> handles = await gate.wait()                      # returns at once
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("tessera.sessions.gate")
        self._state = ReadyState.PENDING
        self._handles: Optional[FamilyHandles] = None
        self._error: Optional[BaseException] = None
        self._listeners: list[ReadyCallback] = []

    @property
    def state(self) -> ReadyState:
        return self._state

    @property
    def handles(self) -> Optional[FamilyHandles]:
        return self._handles

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    @property
    def pending_count(self) -> int:
        return len(self._listeners)

    def on_ready(self, callback: ReadyCallback) -> None:
        """
        Register a one-shot listener.

        Invoked immediately if the gate is decided, otherwise queued.
        The callback receives ``(error, handles)``; exactly one is None.
        """
        if self._state is ReadyState.PENDING:
            self._listeners.append(callback)
            return
        self._invoke(callback)

    async def wait(self) -> FamilyHandles:
        """
        Wait for the gate to be decided.

        Returns:
            The resolved family handles

        Raises:
            The cached provisioning fault if the gate failed
        """
        if self._state is ReadyState.READY:
            return self._handles
        if self._state is ReadyState.FAILED:
            # Drop frames from earlier replays so the cached fault stays bounded
            raise self._error.with_traceback(None)

        future = asyncio.get_running_loop().create_future()

        def _settle(error, handles):
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(handles)

        self.on_ready(_settle)
        return await future

    def resolve(self, handles: FamilyHandles) -> None:
        """Mark the gate READY and drain listeners."""
        self._decide(ReadyState.READY)
        self._handles = handles
        self._drain()

    def fail(self, error: BaseException) -> None:
        """Mark the gate FAILED and drain listeners."""
        self._decide(ReadyState.FAILED)
        self._error = error
        self._drain()

    def _decide(self, state: ReadyState) -> None:
        if self._state is not ReadyState.PENDING:
            raise GateAlreadyResolvedFault(self._state.value)
        self._state = state

    def _drain(self) -> None:
        listeners, self._listeners = self._listeners, []
        for callback in listeners:
            self._invoke(callback)

    def _invoke(self, callback: ReadyCallback) -> None:
        try:
            callback(self._error, self._handles)
        except Exception as e:
            self.logger.error(f"Ready listener error: {e}")


async def ensure_family(
    family: RecordStore,
    schema: FamilySchema = DEFAULT_SCHEMA,
    log: logging.Logger | None = None,
) -> None:
    """
    Probe a family with a sentinel read and create it when missing.

    Creation failures are logged and swallowed: the family may have been
    created concurrently, or may become usable later. If it never does,
    every operation on it fails with its own store fault.

    Raises:
        ProvisioningFault: The probe failed for any reason other than a
            missing family
    """
    log = log or logger
    try:
        await family.get(SENTINEL_KEY, [SENTINEL_KEY])
        return
    except FamilyNotFoundFault:
        pass
    except Exception as e:
        raise ProvisioningFault(family.name, e) from e

    try:
        await family.create(schema)
    except Exception as e:
        # Gate still resolves READY; operations on this family will fail individually
        log.warning(f"Could not create family '{family.name}', continuing: {e}")


async def provision(
    gate: ReadinessGate,
    store_family: RecordStore,
    ticket_family: RecordStore,
    schema: FamilySchema = DEFAULT_SCHEMA,
) -> ReadyState:
    """
    Check (and create) both families in order, then decide the gate.

    Stops at the first fatal probe error; the second family is not touched.
    """
    log = gate.logger
    try:
        for family in (store_family, ticket_family):
            await ensure_family(family, schema, log)
    except ProvisioningFault as fault:
        log.error(f"Session store provisioning failed: {fault}")
        gate.fail(fault)
        return gate.state

    gate.resolve(FamilyHandles(store=store_family, ticket=ticket_family))
    log.info(f"Session store ready (store={store_family.name}, ticket={ticket_family.name})")
    return gate.state
