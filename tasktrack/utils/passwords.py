from passlib.context import CryptContext
from tasktrack.config import BCRYPT_ROUNDS
from tasktrack.errors import HashingError

BCRYPT_MAX_BYTES = 72


def _check_length(password: str):
    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError("password too long: must be at most 72 bytes when UTF-8 encoded")


class PasswordHasher:
    """bcrypt hashing with a configurable cost.

    The cost and salt live inside the hash string (``$2b$<rounds>$...``) so
    hashes made under an older cost keep verifying after the default changes.
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        """Hash a password after validating bcrypt's 72-byte limit.

        Raises ValueError if the UTF-8 encoding of the password exceeds 72 bytes,
        and HashingError if the bcrypt backend itself fails.
        """
        _check_length(password)
        try:
            return self._context.hash(password)
        except (OSError, RuntimeError) as exc:
            raise HashingError() from exc

    def verify(self, password: str, hashed: str) -> bool:
        """Constant-time check of a plaintext password against a stored hash.

        Over-long passwords and unparseable hashes count as a mismatch.
        """
        try:
            return self._context.verify(password, hashed)
        except (ValueError, TypeError):
            return False

    def needs_rehash(self, hashed: str) -> bool:
        try:
            cost = int(hashed.split("$")[2])
        except (IndexError, ValueError):
            return True
        return cost != self.rounds or self._context.needs_update(hashed)

    def dummy_verify(self):
        # keeps login timing flat when the email is unknown
        self._context.dummy_verify()
