"""Google ID token verification."""

import logging
from google.auth import exceptions as google_exceptions
from google.oauth2 import id_token
from google.auth.transport import requests as google_requests

logger = logging.getLogger(__name__)


class InvalidIdentityToken(Exception):
    pass


class GoogleIdentityVerifier:
    def __init__(self, client_id):
        self.client_id = client_id
        self._request = google_requests.Request()

    def verify(self, token):
        """Return {"email", "name", "sub"} from a valid ID token for our client id."""
        try:
            claims = id_token.verify_oauth2_token(token, self._request, self.client_id)
        except (ValueError, google_exceptions.GoogleAuthError) as e:
            logger.info("Google ID token rejected: %s", e)
            raise InvalidIdentityToken(str(e))
        return {
            "email": claims.get("email") or "",
            "name": claims.get("name") or "",
            "sub": claims.get("sub"),
        }
