"""
Tessera store - Fault definitions.

Typed faults raised by RecordStore backends. Core operations never catch
these; they reach the caller of the operation that triggered them.
"""

from __future__ import annotations

from tessera.faults.core import Fault, FaultDomain, Severity


class StoreFault(Fault):
    """Base class for record store faults."""

    domain = FaultDomain.STORE


class StoreUnavailableFault(StoreFault):
    """
    Backend failed a read or write.

    Transient by nature (connection refused, timeout); retry may succeed.
    """

    code = "STORE_UNAVAILABLE"
    message = "Record store unavailable"
    severity = Severity.ERROR
    retryable = True

    def __init__(self, store_name: str, cause: str | None = None, **kwargs):
        self.store_name = store_name
        self.cause = cause
        if cause:
            message = f"Record store '{store_name}' unavailable: {cause}"
        else:
            message = f"Record store '{store_name}' unavailable"
        super().__init__(
            message=message,
            metadata={"store": store_name, "cause": cause},
            **kwargs,
        )


class FamilyNotFoundFault(StoreFault):
    """
    The column family has not been provisioned.

    Raised by ``get``/``set`` on a family that does not exist. The readiness
    gate treats this as "create me", every other caller as an error.
    """

    code = "STORE_FAMILY_NOT_FOUND"
    message = "Column family not found"
    severity = Severity.WARN
    retryable = False

    def __init__(self, family: str, **kwargs):
        self.family = family
        super().__init__(
            message=f"Column family '{family}' does not exist",
            metadata={"family": family},
            **kwargs,
        )


class FamilyAlreadyExistsFault(StoreFault):
    """``create`` was called for a family that already exists."""

    code = "STORE_FAMILY_EXISTS"
    message = "Column family already exists"
    severity = Severity.WARN
    retryable = False

    def __init__(self, family: str, **kwargs):
        self.family = family
        super().__init__(
            message=f"Column family '{family}' already exists",
            metadata={"family": family},
            **kwargs,
        )
