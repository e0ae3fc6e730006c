"""
Tests for the fault taxonomy (tessera/faults, tessera/store/faults.py,
tessera/sessions/faults.py).
"""

import pytest

from tessera.faults import Fault, FaultDomain, Severity
from tessera.sessions.faults import (
    GateAlreadyResolvedFault,
    InvalidTicketFault,
    InvalidTokenFault,
    ProvisioningFault,
    SessionFault,
    TicketRetryExhaustedFault,
    fingerprint,
)
from tessera.store.faults import (
    FamilyAlreadyExistsFault,
    FamilyNotFoundFault,
    StoreFault,
    StoreUnavailableFault,
)


class TestFault:

    def test_explicit_fields(self):
        fault = Fault(code="X", message="boom", domain=FaultDomain.SESSION)
        assert str(fault) == "[X] boom"
        assert fault.severity is Severity.WARN
        assert fault.retryable is False
        assert fault.public is False

    def test_missing_fields(self):
        with pytest.raises(TypeError):
            Fault(code="X")

    def test_domain_equality(self):
        assert FaultDomain.STORE == "store"
        assert FaultDomain.STORE == FaultDomain("store")
        assert repr(FaultDomain.CONFIG) == "FaultDomain(name='config')"

    def test_to_dict(self):
        d = StoreUnavailableFault("redis", cause="timeout").to_dict()
        assert d["code"] == "STORE_UNAVAILABLE"
        assert d["domain"] == "store"
        assert d["metadata"] == {"store": "redis", "cause": "timeout"}


class TestStoreFaults:

    def test_hierarchy(self):
        for fault in (
            StoreUnavailableFault("redis"),
            FamilyNotFoundFault("f"),
            FamilyAlreadyExistsFault("f"),
        ):
            assert isinstance(fault, StoreFault)
            assert fault.domain == FaultDomain.STORE

    def test_unavailable_message(self):
        assert StoreUnavailableFault("redis").message == "Record store 'redis' unavailable"
        assert StoreUnavailableFault("redis", cause="x").retryable is True

    def test_family_not_found(self):
        fault = FamilyNotFoundFault("session_store")
        assert fault.code == "STORE_FAMILY_NOT_FOUND"
        assert fault.family == "session_store"
        assert fault.retryable is False


class TestSessionFaults:

    def test_provisioning(self):
        cause = StoreUnavailableFault("redis")
        fault = ProvisioningFault("session_store", cause)
        assert isinstance(fault, SessionFault)
        assert fault.severity is Severity.FATAL
        assert fault.cause is cause
        assert "session_store" in fault.message

    def test_invalid_ticket_and_token(self):
        ticket = InvalidTicketFault("abc")
        token = InvalidTokenFault("xyz")
        assert ticket.message == "Wrong ticket"
        assert token.message == "Wrong token"
        assert ticket.public and token.public
        assert ticket.metadata["ticket"] == fingerprint("abc")

    def test_retry_exhausted(self):
        fault = TicketRetryExhaustedFault(5)
        assert fault.code == "SESSION_TICKET_RETRY_EXHAUSTED"
        assert fault.retryable is True
        assert "5 attempts" in fault.message

    def test_gate_resolved_is_system_fault(self):
        fault = GateAlreadyResolvedFault("ready")
        assert fault.domain == FaultDomain.SYSTEM
        assert not isinstance(fault, SessionFault)

    def test_fingerprint(self):
        assert fingerprint("abc").startswith("sha256:")
        assert len(fingerprint("abc")) == len("sha256:") + 16
        assert fingerprint("abc") != fingerprint("abd")
