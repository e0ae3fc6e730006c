"""
Tessera - ticket/token session store.

Issues opaque tickets bound to user ids, relays them across devices with
short typable tokens, and keeps per-user session attributes in a separate
column family.
"""

from .config import SessionConfig, build_session_config, create_keyspace, load_session_config
from .faults import ConfigFault, Fault, FaultDomain, Severity
from .sessions import (
    InvalidTicketFault,
    InvalidTokenFault,
    ProvisioningFault,
    ReadyState,
    TicketSessionManager,
    TicketSessionMiddleware,
    create_session_manager,
)
from .store import MemoryKeyspace, RedisKeyspace, StoreUnavailableFault

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "SessionConfig",
    "build_session_config",
    "create_keyspace",
    "load_session_config",
    "ConfigFault",
    "Fault",
    "FaultDomain",
    "Severity",
    "InvalidTicketFault",
    "InvalidTokenFault",
    "ProvisioningFault",
    "ReadyState",
    "TicketSessionManager",
    "TicketSessionMiddleware",
    "create_session_manager",
    "MemoryKeyspace",
    "RedisKeyspace",
    "StoreUnavailableFault",
]
