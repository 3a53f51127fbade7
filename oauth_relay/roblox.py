"""
Roblox API client: OAuth code exchange, username lookup, friends list.
Stateless; every call is a single request bounded by HTTP_TIMEOUT_SECONDS. No retries.
"""
import logging
import re

import httpx

from oauth_relay.config import FRIENDS_API_URL, HTTP_TIMEOUT_SECONDS, TOKEN_URL, USERS_API_URL

logger = logging.getLogger(__name__)

# Roblox user ids are int64; 19 digits also keeps int() far below the str-to-int conversion limit
_USER_ID_RE = re.compile(r"^[0-9]{1,19}$")


class RobloxError(Exception):
    """Base for everything this module raises."""


class UpstreamError(RobloxError):
    """Roblox answered with a non-2xx status, an unreadable body, or the request could not be sent."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamTimeout(UpstreamError):
    """No answer from Roblox within HTTP_TIMEOUT_SECONDS."""


class UsernameNotFound(RobloxError, LookupError):
    pass


class InvalidArgument(RobloxError, ValueError):
    pass


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def _send(method: str, url: str, **kwargs) -> httpx.Response:
    """Issue one request; translate transport failures into UpstreamError/UpstreamTimeout."""
    send = httpx.post if method == "POST" else httpx.get
    try:
        return send(url, timeout=HTTP_TIMEOUT_SECONDS, **kwargs)
    except httpx.TimeoutException as e:
        logger.error("Roblox %s %s timed out: %s", method, url, e)
        raise UpstreamTimeout(f"Timed out calling {url}") from e
    except httpx.HTTPError as e:
        logger.error("Roblox %s %s failed: %s", method, url, e)
        raise UpstreamError(f"Request to {url} failed") from e


def _json(r: httpx.Response, what: str):
    try:
        return r.json()
    except ValueError as e:
        raise UpstreamError(f"{what}: response is not JSON", status_code=r.status_code) from e


def exchange_code(code: str, *, client_id: str, client_secret: str, redirect_uri: str) -> dict:
    """
    Exchange an authorization code for a token bundle (POST token endpoint, form encoded).
    Returns the provider's JSON verbatim. Raises UpstreamError on non-2xx; the body is kept on the
    exception for server-side logging only.
    """
    r = _send(
        "POST",
        TOKEN_URL,
        data={
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
            "client_id": client_id,
            "client_secret": client_secret,
        },
        headers={"Accept": "application/json"},
    )
    if not _is_success(r.status_code):
        raise UpstreamError("Token exchange failed", status_code=r.status_code, body=r.text)
    return _json(r, "Token exchange")


def resolve_username(username: str) -> int:
    """Resolve one username to its numeric user id via the batch lookup endpoint."""
    if not username or not username.strip():
        raise InvalidArgument("username is required")
    r = _send(
        "POST",
        f"{USERS_API_URL}/v1/usernames/users",
        json={"usernames": [username.strip()], "excludeBannedUsers": False},
        headers={"Accept": "application/json"},
    )
    if not _is_success(r.status_code):
        raise UpstreamError(
            f"Failed to resolve username (HTTP {r.status_code})", status_code=r.status_code, body=r.text
        )
    data = _json(r, "Username lookup")
    results = data.get("data") if isinstance(data, dict) else None
    if results is None or results == []:
        raise UsernameNotFound(username)
    if not isinstance(results, list) or not isinstance(results[0], dict) or "id" not in results[0]:
        raise UpstreamError("Username lookup: malformed response", status_code=r.status_code)
    return results[0]["id"]


def parse_user_id(user_id: int | str) -> int:
    """
    Accept a positive integer or a string of digits. Anything else raises InvalidArgument,
    so nothing but digits ever reaches the request path.
    """
    if isinstance(user_id, bool):
        raise InvalidArgument("Invalid userId: must be a positive number")
    if isinstance(user_id, int):
        value = user_id
    elif isinstance(user_id, str) and _USER_ID_RE.match(user_id.strip()):
        value = int(user_id.strip())
    else:
        raise InvalidArgument("Invalid userId: must be a positive number")
    if value <= 0:
        raise InvalidArgument("Invalid userId: must be a positive number")
    return value


def list_friends(user_id: int | str) -> list:
    """Return the friends of user_id as Roblox reports them (the `data` array), or [] if absent."""
    numeric_id = parse_user_id(user_id)
    r = _send(
        "GET",
        f"{FRIENDS_API_URL}/v1/users/{numeric_id}/friends",
        headers={"Accept": "application/json"},
    )
    if not _is_success(r.status_code):
        raise UpstreamError(
            f"Failed to fetch friends (HTTP {r.status_code})", status_code=r.status_code, body=r.text
        )
    data = _json(r, "Friends lookup")
    friends = data.get("data") if isinstance(data, dict) else None
    return friends if isinstance(friends, list) else []
