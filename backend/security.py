"""Password hashing for protected files."""

from passlib.context import CryptContext


class PasswordHasher:
    """bcrypt hashing via passlib; comparison is constant-time in bcrypt."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return self._context.verify(password, password_hash)
        except ValueError:
            # Malformed hash in the database
            return False
