"""
Password hashing helpers (Argon2id via argon2-cffi).

``verify_password`` never raises for a wrong or malformed hash; it simply
returns False so callers can fold "unknown user" and "wrong password" into
the same failure.
"""
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

ph = PasswordHasher()

# Verified against when the email is unknown, so a failed login costs the
# same whether or not the account exists.
DUMMY_PASSWORD_HASH = ph.hash("dummy-password-for-timing")


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify *password* against an Argon2 hash in constant time."""
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False
