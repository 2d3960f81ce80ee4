from typing import Protocol

from src.core.ports.store import WriteBatch
from src.domain.entities import Member


class MembershipStorePort(Protocol):
    def get_member(self, company_id: str, uid: str) -> Member | None: ...
    def commit(self, batch: WriteBatch) -> None: ...
