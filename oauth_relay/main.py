"""
OAuth relay for Roblox.
Browser login popup -> /auth/start -> Roblox -> /auth/callback -> bridge page -> /auth/token/{id}.
Also exposes username lookup and friends list. Port 8000 by default.
"""
from fastapi import FastAPI

from oauth_relay.config import HANDOFF_TTL_SECONDS, HOST, LOG_LEVEL, PORT
from oauth_relay.handoff_store import HandoffStore
from oauth_relay.oauth import router as oauth_router
from oauth_relay.users import router as users_router

app = FastAPI(title="OAuth Relay", version="0.1.0")
app.state.handoff_store = HandoffStore(ttl_seconds=HANDOFF_TTL_SECONDS)
app.include_router(oauth_router, tags=["oauth"])
app.include_router(users_router, tags=["users"])


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "oauth_relay"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "oauth_relay.main:app",
        host=HOST,
        port=PORT,
        log_level=LOG_LEVEL,
    )
