"""Password hashing with bcrypt."""

import bcrypt

from app.config import Settings, get_settings

# bcrypt only looks at the first 72 bytes; longer input raises in bcrypt>=4.1
_BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """One-way salted hash and verification."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.rounds = settings.BCRYPT_ROUNDS

    def hash(self, password: str) -> str:
        """Hash a plain-text password for storage."""
        pw_bytes = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a plain-text password against a stored hash."""
        pw_bytes = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            return False


_hasher: PasswordHasher | None = None


def get_password_hasher() -> PasswordHasher:
    """Get singleton password hasher instance."""
    global _hasher
    if _hasher is None:
        _hasher = PasswordHasher()
    return _hasher
