"""
OAuth relay routes: GET /auth/start, /auth/callback, /auth/token/{id}.
start sets the state cookie and redirects to Roblox; callback checks state, exchanges the code
server-side and parks the tokens in the handoff store; the opener collects them once via /auth/token.
"""
import html
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse

from oauth_relay import roblox
from oauth_relay.config import (
    AUTHORIZE_URL,
    BRIDGE_TARGET_ORIGIN,
    CLIENT_ID,
    CLIENT_SECRET,
    DEFAULT_SCOPE,
    REDIRECT_URI,
    STATE_COOKIE_MAX_AGE,
    STATE_COOKIE_NAME,
    STATE_COOKIE_SECURE,
)
from oauth_relay.handoff_store import HandoffExpired, HandoffNotFound, HandoffStore
from oauth_relay.state import build_authorize_url, generate_state, states_match

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth")


def get_handoff_store(request: Request) -> HandoffStore:
    """Dependency: the app's handoff store (created in main.py)."""
    return request.app.state.handoff_store


def _error_page(title: str, message: str, status_code: int) -> HTMLResponse:
    return HTMLResponse(
        f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{html.escape(title)}</title></head>
<body>
  <h1>{html.escape(title)}</h1>
  <p>{html.escape(message)}</p>
</body>
</html>""",
        status_code=status_code,
    )


def _bridge_page(auth_id: str) -> str:
    """HTML that hands {auth_id} to window.opener via postMessage, then closes the popup."""
    payload = json.dumps({"auth_id": auth_id})
    target_origin = json.dumps(BRIDGE_TARGET_ORIGIN)
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>OAuth Complete</title></head>
<body>
<script>
  (function() {{
    try {{
      var payload = {payload};
      if (window.opener && typeof window.opener.postMessage === 'function') {{
        window.opener.postMessage(payload, {target_origin});
      }}
    }} catch (e) {{
      // opener gone or cross-origin; nothing else to do
    }}
    setTimeout(function() {{ window.close(); }}, 500);
  }})();
</script>
OAuth complete. You can close this window.
</body>
</html>"""


@router.get("/start")
def start(
    client_id: str | None = None,
    redirect_uri: str | None = None,
    scope: str | None = None,
):
    """
    Redirect the browser to the Roblox authorize endpoint.
    The state token is kept only in an http-only cookie; nothing is stored server-side.
    """
    if not client_id or not redirect_uri:
        return PlainTextResponse("Missing client_id or redirect_uri", status_code=400)

    state = generate_state()
    url = build_authorize_url(
        authorize_url=AUTHORIZE_URL,
        client_id=client_id,
        redirect_uri=redirect_uri,
        scope=scope or DEFAULT_SCOPE,
        state=state,
    )
    response = RedirectResponse(url=url, status_code=302)
    response.set_cookie(
        STATE_COOKIE_NAME,
        state,
        max_age=STATE_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=STATE_COOKIE_SECURE,
    )
    logger.info("oauth flow started client_id=%s", client_id)
    return response


@router.get("/callback", response_class=HTMLResponse)
def callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    error_description: str | None = None,
    store: HandoffStore = Depends(get_handoff_store),
):
    """
    Handle the redirect from Roblox. Validates state against the cookie, exchanges the code,
    stores the tokens and renders the bridge page carrying only the handoff id.
    """
    cookie_state = request.cookies.get(STATE_COOKIE_NAME)

    if error:
        logger.warning("oauth flow failed at provider: error=%s", error)
        return _error_page("Login error", error_description or error, 400)

    if not code or not states_match(state, cookie_state):
        logger.warning("oauth callback rejected: invalid state or missing code")
        return PlainTextResponse("Invalid state or missing code", status_code=400)

    if not CLIENT_ID or not CLIENT_SECRET or not REDIRECT_URI:
        logger.error("oauth callback: OAUTH_CLIENT_ID, OAUTH_CLIENT_SECRET and OAUTH_REDIRECT_URI must be set")
        return PlainTextResponse("OAuth server not configured", status_code=500)

    try:
        try:
            tokens = roblox.exchange_code(
                code,
                client_id=CLIENT_ID,
                client_secret=CLIENT_SECRET,
                redirect_uri=REDIRECT_URI,
            )
        except roblox.UpstreamTimeout:
            return PlainTextResponse("Token exchange timed out", status_code=504)
        except roblox.UpstreamError as e:
            logger.error("Token exchange failed: status=%s body=%s", e.status_code, e.body)
            return PlainTextResponse("Token exchange failed", status_code=502)

        auth_id = store.put(tokens)
    except Exception:
        logger.exception("OAuth callback error")
        return PlainTextResponse("Server error", status_code=500)

    logger.info("oauth flow completed client_id=%s", CLIENT_ID)
    response = HTMLResponse(_bridge_page(auth_id))
    response.delete_cookie(STATE_COOKIE_NAME, httponly=True, samesite="lax", secure=STATE_COOKIE_SECURE)
    return response


@router.get("/token")
@router.get("/token/")
def token_missing_id():
    return JSONResponse({"error": "invalid_request", "error_description": "Missing id"}, status_code=400)


@router.get("/token/{auth_id}")
def token(auth_id: str, store: HandoffStore = Depends(get_handoff_store)):
    """Return the token bundle for auth_id once. 404 if unknown or already taken, 410 if expired."""
    if not auth_id.strip():
        return JSONResponse({"error": "invalid_request", "error_description": "Missing id"}, status_code=400)
    try:
        tokens = store.take(auth_id)
    except HandoffExpired:
        return JSONResponse({"error": "expired", "error_description": "Token expired"}, status_code=410)
    except HandoffNotFound:
        return JSONResponse(
            {"error": "not_found", "error_description": "Token not found or expired"}, status_code=404
        )
    return {"tokens": tokens}
