# company-roster - Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.email import (
    EmailAddress,
    EmailError,
    EmailPort,
    EmailResult,
    EmailSendError,
    EmailStatus,
)
from src.core.ports.identity import IdentityPort
from src.core.ports.store import (
    DuplicateRecordError,
    MembershipStorePort,
    RecordNotFoundError,
    StoreError,
    WriteBatch,
)

__all__ = [
    # Email
    "EmailAddress",
    "EmailError",
    "EmailPort",
    "EmailResult",
    "EmailSendError",
    "EmailStatus",
    # Identity
    "IdentityPort",
    # Store
    "DuplicateRecordError",
    "MembershipStorePort",
    "RecordNotFoundError",
    "StoreError",
    "WriteBatch",
]
