"""
Google Sign-In ID token verification
"""
import logging
from typing import Dict

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from elearning.config import settings
from elearning.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


def verify_google_token(token: str) -> Dict[str, str]:
    """
    Verify a Google ID token against the configured client ID

    Returns:
        Dict with name, email and picture of the Google account

    Raises:
        UnauthorizedError: token invalid, expired or issued for another client
    """
    try:
        payload = id_token.verify_oauth2_token(
            token,
            google_requests.Request(),
            audience=settings.GOOGLE_CLIENT_ID
        )
    except Exception as e:
        logger.error(f"Error verifying Google token: {str(e)}")
        raise UnauthorizedError("Invalid Google token")

    return {
        "name": payload.get("name"),
        "email": payload.get("email"),
        "picture": payload.get("picture"),
    }
