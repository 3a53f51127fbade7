"""
Social-graph routes backed by the public Roblox APIs.
GET /users/by-username/{username}, GET /users/{user_id}/friends.
"""
import logging

from fastapi import APIRouter, HTTPException

from oauth_relay import roblox

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users")


def _upstream_exception(e: roblox.UpstreamError) -> HTTPException:
    """Upstream detail stays in the log; callers get an opaque 502/504."""
    # Transport failures (no status) are already logged by roblox._send
    if e.status_code is not None:
        logger.error("Roblox call failed: %s status=%s body=%s", e, e.status_code, e.body)
    if isinstance(e, roblox.UpstreamTimeout):
        return HTTPException(
            status_code=504,
            detail={"error": "upstream_timeout", "error_description": "Roblox did not respond in time"},
        )
    return HTTPException(
        status_code=502,
        detail={"error": "upstream_error", "error_description": "Roblox request failed"},
    )


@router.get("/by-username/{username}")
def user_by_username(username: str):
    """Resolve a Roblox username to its user id."""
    try:
        user_id = roblox.resolve_username(username)
    except roblox.InvalidArgument as e:
        raise HTTPException(status_code=400, detail={"error": "invalid_request", "error_description": str(e)})
    except roblox.UsernameNotFound:
        raise HTTPException(status_code=404, detail={"error": "not_found", "error_description": "Username not found"})
    except roblox.UpstreamError as e:
        raise _upstream_exception(e)
    return {"username": username, "user_id": user_id}


@router.get("/{user_id}/friends")
def user_friends(user_id: str):
    """Friends of a Roblox user id, as returned by the friends API."""
    try:
        numeric_id = roblox.parse_user_id(user_id)
        friends = roblox.list_friends(numeric_id)
    except roblox.InvalidArgument as e:
        raise HTTPException(status_code=400, detail={"error": "invalid_request", "error_description": str(e)})
    except roblox.UpstreamError as e:
        raise _upstream_exception(e)
    return {"user_id": numeric_id, "friends": friends}
