import base64
import hashlib
import hmac
import json
import time

from career_readiness.core.config import settings

# Tokens are issued by the account service; this module only has to agree with
# it on the format: base64url(payload).base64url(hmac_sha256(payload)).


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64url_decode(raw: str) -> bytes:
    padding = "=" * ((4 - len(raw) % 4) % 4)
    return base64.urlsafe_b64decode(raw + padding)


def _sign(payload_b64: str) -> str:
    sig = hmac.new(
        settings.auth_secret.encode("utf-8"),
        payload_b64.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return _b64url_encode(sig)


def create_access_token(user_id: str, *, ttl_seconds: int | None = None) -> str:
    now = int(time.time())
    payload = {
        "sub": user_id,
        "typ": "access",
        "exp": now + (ttl_seconds if ttl_seconds is not None else settings.auth_token_ttl_seconds),
        "iat": now,
    }
    payload_raw = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    payload_b64 = _b64url_encode(payload_raw)
    return f"{payload_b64}.{_sign(payload_b64)}"


def verify_auth_token(token: str) -> str | None:
    try:
        payload_b64, sig_b64 = token.split(".", 1)
    except ValueError:
        return None

    if not hmac.compare_digest(_sign(payload_b64), sig_b64):
        return None

    try:
        payload = json.loads(_b64url_decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None

    user_id = payload.get("sub")
    exp = payload.get("exp")
    token_type = payload.get("typ")
    if not user_id or not isinstance(exp, int):
        return None
    if exp < int(time.time()):
        return None
    # Accept legacy tokens that have no "typ", but reject explicit non-access tokens.
    if token_type and token_type != "access":
        return None
    return user_id
