import logging
from functools import lru_cache

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.exceptions import AuthError, DependencyError

log = logging.getLogger("wynngrid.google")


class GoogleTokenVerifier:
    """Verifies a Google ID token against our OAuth client id."""

    def __init__(self, client_id: str):
        self.client_id = client_id

    def _verify_sync(self, token: str) -> dict:
        return id_token.verify_oauth2_token(token, google_requests.Request(), self.client_id)

    async def __call__(self, token: str) -> dict:
        if not self.client_id:
            log.error("GOOGLE_CLIENT_ID is not set")
            raise DependencyError("Google sign-in is not configured", status_code=500)
        try:
            return await run_in_threadpool(self._verify_sync, token)
        except ValueError as e:
            # Expired, wrong audience, bad signature...
            log.info("Google token validation failed: %s", str(e)[:80])
            raise AuthError("Invalid Google token") from e
        except google_exceptions.TransportError as e:
            log.error("Could not reach Google to verify token: %s", e)
            raise DependencyError("Google sign-in is unavailable") from e


@lru_cache
def get_google_verifier() -> GoogleTokenVerifier:
    return GoogleTokenVerifier(settings.GOOGLE_CLIENT_ID)
