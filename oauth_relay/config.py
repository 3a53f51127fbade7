"""
OAuth relay configuration. Read once from the environment at startup.
Client credentials are trusted server-side values; an empty value means the callback is not configured.
"""
import os

# Our registered Roblox OAuth app. All three are required for /auth/callback to exchange codes.
CLIENT_ID = os.environ.get("OAUTH_CLIENT_ID", "").strip()
CLIENT_SECRET = os.environ.get("OAUTH_CLIENT_SECRET", "").strip()
REDIRECT_URI = os.environ.get("OAUTH_REDIRECT_URI", "").strip()

# Scope requested when /auth/start is called without one
DEFAULT_SCOPE = os.environ.get("OAUTH_SCOPE", "openid profile")

# Roblox endpoints (overridable for local fakes)
AUTHORIZE_URL = os.environ.get("ROBLOX_AUTHORIZE_URL", "https://apis.roblox.com/oauth/v1/authorize")
TOKEN_URL = os.environ.get("ROBLOX_TOKEN_URL", "https://apis.roblox.com/oauth/v1/token")
USERS_API_URL = os.environ.get("ROBLOX_USERS_API_URL", "https://users.roblox.com").rstrip("/")
FRIENDS_API_URL = os.environ.get("ROBLOX_FRIENDS_API_URL", "https://friends.roblox.com").rstrip("/")

# Upper bound on every outbound call to Roblox (seconds)
HTTP_TIMEOUT_SECONDS = float(os.environ.get("ROBLOX_HTTP_TIMEOUT", "10"))

# How long a token bundle waits in the handoff store for the opener to collect it
HANDOFF_TTL_SECONDS = int(os.environ.get("OAUTH_HANDOFF_TTL", "90"))

# Anti-forgery state cookie set by /auth/start and checked by /auth/callback
STATE_COOKIE_NAME = "oauth_state"
STATE_COOKIE_MAX_AGE = int(os.environ.get("OAUTH_STATE_COOKIE_MAX_AGE", "600"))
STATE_COOKIE_SECURE = os.environ.get("OAUTH_STATE_COOKIE_SECURE", "").lower() in ("1", "true", "yes")

# targetOrigin for postMessage in the bridge page; "*" matches any opener
BRIDGE_TARGET_ORIGIN = os.environ.get("OAUTH_BRIDGE_TARGET_ORIGIN", "*")

HOST = os.environ.get("OAUTH_RELAY_HOST", "127.0.0.1")
PORT = int(os.environ.get("OAUTH_RELAY_PORT", "8000"))
LOG_LEVEL = os.environ.get("OAUTH_RELAY_LOG_LEVEL", "info")
