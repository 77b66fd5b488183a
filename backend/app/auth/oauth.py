"""Google OAuth configuration using the authlib Starlette integration."""

from authlib.integrations.starlette_client import OAuth

from app.config import settings

oauth = OAuth()

# OpenID Connect, endpoints are auto-discovered
oauth.register(
    name="google",
    client_id=settings.google_client_id,
    client_secret=settings.google_client_secret,
    server_metadata_url="https://accounts.google.com/.well-known/openid-configuration",
    client_kwargs={"scope": "openid email profile"},
)

# Session key holding the role picked before the consent redirect
OAUTH_ROLE_SESSION_KEY = "oauth_role"


async def get_google_user_info(token: dict) -> dict:
    """Extract standardized user info from a Google OAuth token response.

    Google puts the profile in the ID token's ``userinfo`` claim, so no extra
    API call is needed.

    Returns:
        dict with keys: email, name, avatar_url, provider, provider_id
    """
    userinfo = token.get("userinfo") or {}
    return {
        "email": userinfo.get("email", ""),
        "name": userinfo.get("name", ""),
        "avatar_url": userinfo.get("picture"),
        "provider": "google",
        "provider_id": userinfo.get("sub", ""),
    }
