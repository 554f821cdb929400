"""CSRF secret generation and the salt masking transform.

A secret is 32 symbols from a 64 symbol URL-safe alphabet. It is never sent
to the client as-is: every time it is embedded in a page it is masked with a
fresh 32 symbol salt, giving a 64 symbol token ``salt + cipher`` where each
cipher symbol is ``(secret + salt) mod 64`` over alphabet indices.

Masking only hides a stable value from logs, referrers and compression side
channels. Unmasked equality with the stored secret is the whole check.
"""
import base64
import secrets

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789abcdefghijklmnopqrstuvwxyz_-"
SECRET_LENGTH = 32
TOKEN_LENGTH = 2 * SECRET_LENGTH

_BASE = len(ALPHABET)
_INDEX = {c: i for i, c in enumerate(ALPHABET)}

# Standard base64 output remapped symbol by symbol onto ALPHABET.
_B64_TO_ALPHABET = bytes.maketrans(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/",
    ALPHABET.encode("ascii"),
)


def random_string(length: int) -> str:
    """Return `length` random symbols from ALPHABET (fresh OS randomness)."""
    raw = secrets.token_bytes(length)
    encoded = base64.b64encode(raw).rstrip(b"=").translate(_B64_TO_ALPHABET)
    return encoded[:length].decode("ascii")


def generate_secret() -> str:
    return random_string(SECRET_LENGTH)


def _is_encoded(value, length: int) -> bool:
    return (
        isinstance(value, str)
        and len(value) == length
        and all(c in _INDEX for c in value)
    )


def is_valid_secret(value) -> bool:
    return _is_encoded(value, SECRET_LENGTH)


def is_valid_token(value) -> bool:
    return _is_encoded(value, TOKEN_LENGTH)


def mask_token(secret: str, salt: str | None = None) -> str:
    """Mask `secret` with `salt` (random when omitted), returns 64 symbols."""
    if not is_valid_secret(secret):
        raise ValueError("secret must be 32 characters from the token alphabet")
    if salt is None:
        salt = random_string(SECRET_LENGTH)
    elif not is_valid_secret(salt):
        raise ValueError("salt must be 32 characters from the token alphabet")

    cipher = "".join(
        ALPHABET[(_INDEX[s] + _INDEX[t]) % _BASE] for s, t in zip(secret, salt)
    )
    return salt + cipher


def unmask_token(token: str) -> str | None:
    """Recover the secret from a masked token, or None if the token is malformed."""
    if not is_valid_token(token):
        return None
    salt, cipher = token[:SECRET_LENGTH], token[SECRET_LENGTH:]
    secret = []
    for c, s in zip(cipher, salt):
        x, y = _INDEX[c], _INDEX[s]
        secret.append(ALPHABET[_BASE + x - y] if x < y else ALPHABET[x - y])
    return "".join(secret)


def verify_token(token: str, secret: str) -> bool:
    """True when `token` is a masked copy of `secret`."""
    if not isinstance(token, str) or not isinstance(secret, str):
        return False
    if len(token) != TOKEN_LENGTH or len(secret) != SECRET_LENGTH:
        return False
    if not is_valid_secret(secret):
        return False
    unmasked = unmask_token(token)
    if unmasked is None:
        return False
    return secrets.compare_digest(unmasked, secret)
