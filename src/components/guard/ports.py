from typing import Protocol

from src.domain.entities import Member


class MemberReaderPort(Protocol):
    def get_member(self, company_id: str, uid: str) -> Member | None: ...
