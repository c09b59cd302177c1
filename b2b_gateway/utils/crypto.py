import hashlib
import hmac
import secrets

KEY_PREFIX_LEN = 8


def hash_token(s: str) -> str:
    return hashlib.sha256(s.encode()).hexdigest()


def token_matches(s: str, stored_hash: str) -> bool:
    return hmac.compare_digest(hash_token(s), stored_hash or "")


def key_prefix(s: str) -> str:
    return s[:KEY_PREFIX_LEN]


def generate_api_key() -> str:
    # prefix must be random so it stays a useful index
    return secrets.token_hex(4) + "_" + secrets.token_urlsafe(32)


def mask_key(s: str) -> str:
    if not s:
        return ""
    return s[:4] + "***" + s[-2:] if len(s) > 8 else "***"
