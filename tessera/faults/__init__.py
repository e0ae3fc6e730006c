"""
Tessera faults - structured error values.

Errors in tessera are typed faults with a stable code, a domain and retry
semantics, so callers can branch on ``fault.code`` instead of message text.
"""

from .core import (
    ConfigFault,
    Fault,
    FaultDomain,
    Severity,
)

__all__ = [
    "ConfigFault",
    "Fault",
    "FaultDomain",
    "Severity",
]
