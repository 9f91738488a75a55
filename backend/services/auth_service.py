import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config.settings import Settings
from services.errors import AdminAuthNotConfigured

logger = logging.getLogger(__name__)

TOKEN_TYPE = "admin"


class AdminAuthService:
    """
    Single shared admin password plus short-lived signed tokens.

    The password check is the whole login; the token only saves the admin UI
    from resending the password on every call.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.algorithm = "HS256"

    def verify_password(self, candidate: Optional[str]) -> bool:
        expected = self.settings.admin_password
        if not expected:
            raise AdminAuthNotConfigured("ADMIN_PASSWORD environment variable is not set.")
        if not isinstance(candidate, str):
            return False
        return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))

    def _secret_key(self) -> str:
        secret = self.settings.jwt_secret_key
        if not secret:
            raise AdminAuthNotConfigured("JWT_SECRET_KEY environment variable is not set.")
        return secret

    def create_access_token(self) -> Tuple[str, datetime]:
        secret = self._secret_key()
        now = datetime.now(timezone.utc)
        expire = now + timedelta(hours=self.settings.admin_token_expire_hours)
        payload = {
            "sub": "admin",
            "type": TOKEN_TYPE,
            "iat": now,
            "exp": expire,
        }
        token = jwt.encode(payload, secret, algorithm=self.algorithm)
        logger.info("Issued admin access token")
        return token, expire

    def verify_token(self, token: str) -> Optional[Dict[str, Any]]:
        """Decoded admin payload, or None. Raises AdminAuthNotConfigured without a secret."""
        secret = self._secret_key()
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.warning("Admin token has expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid admin token: {e}")
            return None

        if payload.get("type") != TOKEN_TYPE:
            logger.warning("Invalid token type")
            return None
        return payload


_bearer = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AdminAuthService:
    return request.app.state.auth_service


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    auth_service: AdminAuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """FastAPI dependency guarding admin routes"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin token required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = auth_service.verify_token(credentials.credentials)
    except AdminAuthNotConfigured as e:
        # no secret means no token can be valid
        logger.error(str(e))
        payload = None
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload
