"""
Stored-secret verification for mail accounts.

Two storage formats are accepted:

  pbkdf2_sha256$<iterations>$<salt>$<hex digest>
      Salted one-way hash. Verified by recomputing PBKDF2-HMAC-SHA256.

  anything else
      Legacy plaintext secret (the sync engine needs the real mailbox
      password for some providers). Compared in constant time.

hash_secret() produces the hashed format for account-management tooling.
"""

import hashlib
import hmac
import secrets
from typing import Optional

HASH_PREFIX = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 390_000
_SALT_BYTES = 16


def hash_secret(secret: str, iterations: int = DEFAULT_ITERATIONS, salt: Optional[str] = None) -> str:
    """Return a pbkdf2_sha256 hash string for the given secret."""
    if salt is None:
        salt = secrets.token_hex(_SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", secret.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{HASH_PREFIX}${iterations}${salt}${digest.hex()}"


def is_hashed(stored: str) -> bool:
    return stored.startswith(HASH_PREFIX + "$")


def verify_secret(stored: Optional[str], supplied: Optional[str]) -> bool:
    """
    Return True if the supplied secret matches the stored value.

    Empty values never match. A malformed hash string is treated as a
    mismatch rather than an error.
    """
    if not stored or not supplied:
        return False

    if not is_hashed(stored):
        return hmac.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))

    parts = stored.split("$")
    if len(parts) != 4:
        return False
    _, iterations_raw, salt, expected_hex = parts
    try:
        iterations = int(iterations_raw)
    except ValueError:
        return False
    if iterations <= 0:
        return False

    digest = hashlib.pbkdf2_hmac("sha256", supplied.encode("utf-8"), salt.encode("utf-8"), iterations)
    return hmac.compare_digest(digest.hex(), expected_hex)


# Hash of a throwaway secret, checked when a lookup matches no hashed row so
# unknown addresses cost one PBKDF2 round like known ones
DUMMY_HASH = hash_secret("mailgate-unknown-account", salt="0" * (_SALT_BYTES * 2))
