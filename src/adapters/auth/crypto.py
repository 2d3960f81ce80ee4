from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError


class Argon2AuthAdapter:
    """Password hashing for the account directory (argon2id)."""

    def __init__(self) -> None:
        self.ph = PasswordHasher()

    def hash_password(self, password: str) -> str:
        return str(self.ph.hash(password))

    def verify_password(self, password: str, hash_str: str) -> bool:
        try:
            self.ph.verify(hash_str, password)
            return True
        except (VerificationError, InvalidHashError):
            return False
