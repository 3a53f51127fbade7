"""
Authorization request helpers for /auth/start and /auth/callback.
State generation, state comparison, and the Roblox authorize URL.
"""
import secrets
from urllib.parse import urlencode


def generate_state() -> str:
    """Opaque value for CSRF protection; round-tripped via cookie and the provider redirect."""
    return secrets.token_urlsafe(32)


def states_match(returned: str | None, expected: str | None) -> bool:
    """Exact, constant-time comparison. Missing or empty values never match."""
    if not returned or not expected:
        return False
    return secrets.compare_digest(returned.encode("utf-8"), expected.encode("utf-8"))


def build_authorize_url(
    *,
    authorize_url: str,
    client_id: str,
    redirect_uri: str,
    scope: str,
    state: str,
) -> str:
    """Build the provider authorize URL for the authorization code flow."""
    params = {
        "response_type": "code",
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "scope": scope,
        "state": state,
    }
    return f"{authorize_url}?{urlencode(params)}"
