"""
Tessera sessions - Fault definitions.

Not-found handling is deliberately asymmetric:
- Lookups (get_id, get_session, get_ticket_session) return None
- Token operations (create_token, exchange_token) raise, because the caller
  asked for a state transition that cannot happen
"""

from __future__ import annotations

import hashlib

from tessera.faults.core import Fault, FaultDomain, Severity


def fingerprint(value: str) -> str:
    """Hash a ticket or token for logs and fault metadata."""
    return f"sha256:{hashlib.sha256(value.encode()).hexdigest()[:16]}"


class SessionFault(Fault):
    """Base class for ticket, token and session faults."""

    domain = FaultDomain.SESSION


# ============================================================================
# Readiness
# ============================================================================

class ProvisioningFault(SessionFault):
    """
    Backing families could not be checked.

    Cached by the readiness gate and replayed to every caller; there is no
    automatic re-provisioning.
    """

    code = "SESSION_PROVISIONING_FAILED"
    message = "Session store provisioning failed"
    severity = Severity.FATAL
    public = False
    retryable = False

    def __init__(self, family: str, cause: Exception, **kwargs):
        self.family = family
        self.cause = cause
        super().__init__(
            message=f"Provisioning of family '{family}' failed: {cause}",
            metadata={"family": family, "cause": repr(cause)},
            **kwargs,
        )


class GateAlreadyResolvedFault(Fault):
    """The readiness gate was resolved twice (programming error)."""

    code = "SESSION_GATE_RESOLVED"
    message = "Readiness gate already resolved"
    domain = FaultDomain.SYSTEM

    def __init__(self, state: str, **kwargs):
        super().__init__(
            message=f"Readiness gate already resolved (state={state})",
            metadata={"state": state},
            **kwargs,
        )


# ============================================================================
# Tickets & Tokens
# ============================================================================

class InvalidTicketFault(SessionFault):
    """Ticket does not exist or has expired."""

    code = "SESSION_INVALID_TICKET"
    message = "Wrong ticket"
    public = True

    def __init__(self, ticket: str, **kwargs):
        super().__init__(metadata={"ticket": fingerprint(ticket)}, **kwargs)


class InvalidTokenFault(SessionFault):
    """Token does not exist or has expired."""

    code = "SESSION_INVALID_TOKEN"
    message = "Wrong token"
    public = True

    def __init__(self, token: str, **kwargs):
        super().__init__(metadata={"token": fingerprint(token)}, **kwargs)


class TicketRetryExhaustedFault(SessionFault):
    """Every generated ticket candidate collided with an existing row."""

    code = "SESSION_TICKET_RETRY_EXHAUSTED"
    message = "Could not generate a unique ticket"
    severity = Severity.ERROR
    retryable = True

    def __init__(self, attempts: int, **kwargs):
        self.attempts = attempts
        super().__init__(
            message=f"Could not generate a unique ticket after {attempts} attempts",
            metadata={"attempts": attempts},
            **kwargs,
        )
