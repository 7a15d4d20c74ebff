"""Account password hashing for registration, profile changes and login.

Hashes are bcrypt via passlib. bcrypt only reads the first 72 bytes of its
input, so longer passwords are rejected at the schema layer and never match
at login; otherwise two passwords sharing a 72-byte prefix would be
interchangeable.
"""

from passlib.context import CryptContext

BCRYPT_MAX_BYTES = 72

_hasher = CryptContext(schemes=["bcrypt"], deprecated="auto")


def password_fits(password: str) -> bool:
    """Whether bcrypt will hash every byte of the password."""
    return len(password.encode("utf-8")) <= BCRYPT_MAX_BYTES


def hash_password(password: str) -> str:
    """Hash a new account password."""
    if not password_fits(password):
        raise ValueError(f"Password exceeds {BCRYPT_MAX_BYTES} bytes")
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a login password against the stored hash in constant time."""
    if not password_fits(password):
        # Still pay for one comparison so the response time gives nothing away
        _hasher.dummy_verify()
        return False
    return _hasher.verify(password, password_hash)


def dummy_verify() -> None:
    """Spend the time of one verification for an email with no account."""
    _hasher.dummy_verify()
