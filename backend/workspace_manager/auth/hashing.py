"""
Login session tokens.

A token is "ws_sess_" followed by 256 random bits in hex. Only its SHA-256
digest is stored (user_sessions.token_hash); a fast hash is enough because
the input is random, not a user-chosen password. The raw token exists in
exactly two places: the login response and the client's cookie or header.
"""

import hashlib
import secrets

TOKEN_PREFIX = "ws_sess_"
_TOKEN_BYTES = 32


def hash_session_token(raw_token: str) -> str:
    """Hex SHA-256 digest used to look a session up."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_session_token() -> tuple[str, str]:
    """Return (raw_token, token_hash) for a new session."""
    raw_token = TOKEN_PREFIX + secrets.token_hex(_TOKEN_BYTES)
    return raw_token, hash_session_token(raw_token)
