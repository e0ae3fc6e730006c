"""
Tessera sessions - tickets, relay tokens and session attributes.

- TicketSessionManager: public facade, gated on store provisioning
- ReadinessGate: PENDING -> READY | FAILED, one-shot listener queue
- TicketManager: collision-checked ticket issuance and resolution
- TokenExchange: short-lived cross-device relay tokens
- SessionAccessor: per-user attribute rows
- TicketSessionMiddleware: ASGI adapter
"""

from .accessor import SessionAccessor
from .faults import (
    GateAlreadyResolvedFault,
    InvalidTicketFault,
    InvalidTokenFault,
    ProvisioningFault,
    SessionFault,
    TicketRetryExhaustedFault,
)
from .gate import (
    FamilyHandles,
    ReadinessGate,
    ReadyState,
    ensure_family,
    provision,
)
from .manager import TicketSessionManager, create_session_manager
from .middleware import TicketSessionMiddleware
from .tickets import TicketManager, generate_ticket
from .tokens import TokenExchange, generate_token

__all__ = [
    # Facade
    "TicketSessionManager",
    "create_session_manager",
    # Components
    "ReadinessGate",
    "ReadyState",
    "FamilyHandles",
    "ensure_family",
    "provision",
    "TicketManager",
    "generate_ticket",
    "TokenExchange",
    "generate_token",
    "SessionAccessor",
    # Adapter
    "TicketSessionMiddleware",
    # Faults
    "SessionFault",
    "ProvisioningFault",
    "GateAlreadyResolvedFault",
    "InvalidTicketFault",
    "InvalidTokenFault",
    "TicketRetryExhaustedFault",
]
