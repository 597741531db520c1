# Password hashing and verification utilities.
import hashlib
import hmac
import secrets
from typing import Optional

from quiz_studio.config import get_password_hash_iterations

HASH_ALGORITHM = "pbkdf2_sha256"


# Generate a random salt string for password hashing.
def generate_salt() -> str:
    return secrets.token_hex(16)


def _derive(password: str, salt: str, iterations: int) -> str:
    return hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations
    ).hex()


# Hash a password into a self-describing "algorithm$rounds$salt$digest" string.
def hash_password(
    password: str, salt: Optional[str] = None, iterations: Optional[int] = None
) -> str:
    salt = salt or generate_salt()
    iterations = iterations or get_password_hash_iterations()
    digest = _derive(password, salt, iterations)
    return f"{HASH_ALGORITHM}${iterations}${salt}${digest}"


# Check a password against a stored hash using a constant-time comparison.
def verify_password(password: str, password_hash: str) -> bool:
    try:
        algorithm, iterations, salt, expected = password_hash.split("$")
        rounds = int(iterations)
    except (AttributeError, ValueError):
        return False
    if algorithm != HASH_ALGORITHM or rounds < 1:
        return False
    candidate = _derive(password, salt, rounds)
    return hmac.compare_digest(candidate, expected)
