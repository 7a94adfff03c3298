import logging
import os

import firebase_admin
from firebase_admin import auth, credentials

from config import get_settings
from schemas import ExternalIdentity
from utils.errors import InvalidTokenError

logger = logging.getLogger("socialnet.api.firebase")

# Set once the default app exists
_initialized = False


def initialize_firebase_admin():
    """Initialise the Firebase Admin SDK once per process.

    Uses the service account file from FIREBASE_CREDENTIALS_PATH when present,
    otherwise application default credentials (GOOGLE_APPLICATION_CREDENTIALS),
    which is enough to verify ID tokens as long as the project id is known.
    """
    global _initialized
    if _initialized:
        return

    settings = get_settings()
    options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
    cred_path = settings.FIREBASE_CREDENTIALS_PATH or os.path.join(
        os.path.dirname(__file__), "..", "serviceAccountKey.json"
    )

    try:
        if os.path.exists(cred_path):
            firebase_admin.initialize_app(credentials.Certificate(cred_path), options)
            logger.info("Firebase Admin initialised with %s", cred_path)
        else:
            logger.warning("Credentials file not found at %s; falling back to application default credentials", cred_path)
            firebase_admin.initialize_app(options=options)
        _initialized = True
    except ValueError:
        # initialize_app raises ValueError when the default app already exists
        firebase_admin.get_app()
        _initialized = True


def verify_id_token(id_token: str) -> dict:
    """Verify a Firebase ID token and return its decoded claims."""
    initialize_firebase_admin()
    try:
        return auth.verify_id_token(id_token)
    except (ValueError, auth.InvalidIdTokenError, auth.CertificateFetchError, auth.UserDisabledError) as e:
        logger.warning("Rejected ID token: %s", e)
        raise InvalidTokenError(str(e)) from e


def identity_from_claims(claims: dict) -> ExternalIdentity:
    """Map decoded token claims onto the identity the resolver works with."""
    email = claims.get("email")
    if not email:
        raise InvalidTokenError("ID token carries no email address")

    return ExternalIdentity(
        uid=claims["uid"],
        email=email,
        username=claims.get("username"),
        name=claims.get("name"),
        picture=claims.get("picture"),
    )
