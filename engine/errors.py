"""Exceptions raised by the allocation engines."""

from typing import Optional


class PreconditionViolation(ValueError):
    """Malformed input reached an engine boundary (programming error)."""


class NonAssignableAddressError(ValueError):
    """An assignment was requested for an address that is already claimed or reserved."""

    def __init__(self, ip_address: str, classification: Optional[object] = None):
        self.ip_address = ip_address
        self.classification = classification
        if classification is not None:
            detail = f"{classification.status.lower()} ({classification.label})"
        else:
            detail = "not assignable"
        super().__init__(f"{ip_address} cannot be assigned: address is {detail}")
