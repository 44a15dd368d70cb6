"""
Secret generation, parsing and hashing for passwords and refresh tokens.

Responsibilities:
- Generate refresh token strings of the form: rt_<token_id>_<secret>
- Hash passwords and token secrets with Argon2id
- Verify hashes without leaking which part failed
"""
from __future__ import annotations

import secrets
import uuid
from dataclasses import dataclass
from typing import Optional, Tuple

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from argon2.low_level import Type

_argon2 = PasswordHasher(time_cost=2, memory_cost=102400, parallelism=8, hash_len=32, type=Type.ID)


REFRESH_TOKEN_PREFIX = "rt_"


@dataclass(frozen=True)
class ParsedToken:
    token_id: str
    secret: str


def generate_token_id() -> str:
    """Return a short hex token id suitable for DB lookup and logs."""
    return uuid.uuid4().hex[:16]


def generate_secret(length: int = 32) -> str:
    return secrets.token_urlsafe(length)


def build_token_string(token_id: str, secret: str) -> str:
    return f"{REFRESH_TOKEN_PREFIX}{token_id}_{secret}"


def parse_token(token: str) -> Optional[ParsedToken]:
    """Parse a refresh token string into token_id and secret.

    Returns None if format is invalid.
    """
    if not token or not token.startswith(REFRESH_TOKEN_PREFIX):
        return None
    body = token[len(REFRESH_TOKEN_PREFIX):]
    # token_id is hex; the secret may itself contain '_'
    idx = body.find("_")
    if idx <= 0:
        return None
    token_id = body[:idx]
    secret = body[idx + 1:]
    if not secret:
        return None
    return ParsedToken(token_id=token_id, secret=secret)


def hash_secret(secret: str) -> str:
    """Hash a password or token secret using Argon2id."""
    return _argon2.hash(secret)


def verify_secret(secret: str, encoded_hash: Optional[str]) -> bool:
    if not secret or not encoded_hash:
        return False
    try:
        return _argon2.verify(encoded_hash, secret)
    except (VerificationError, InvalidHashError):
        return False


def generate_token() -> Tuple[str, str, str]:
    """Generate a new refresh token and return (token_id, secret, full_token)."""
    tid = generate_token_id()
    sec = generate_secret()
    return tid, sec, build_token_string(tid, sec)
