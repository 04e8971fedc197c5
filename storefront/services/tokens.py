"""Session tokens issued after a successful OTP verification"""

import logging
import time

import jwt

from grama_common.errors import NotAuthenticated
from grama_common.models import User

logger = logging.getLogger(__name__)


class SessionTokenIssuer:
    """
    Signs and checks session tokens (JWT).

    Tokens carry the user id, phone number and role. They do not expire;
    a session ends when the client logs out.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self._secret = secret
        self.algorithm = algorithm

    def issue(self, user: User) -> str:
        claims = {
            "sub": user.id,
            "phone": user.phone_number,
            "role": user.role.value,
            "iat": int(time.time()),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        """
        Validate a token and return its claims.

        Raises:
            NotAuthenticated: missing, tampered or malformed token
        """
        if not token:
            raise NotAuthenticated()

        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub"]},
            )
        except jwt.InvalidTokenError as e:
            logger.info(f"Rejected session token: {e}")
            raise NotAuthenticated("Invalid session token") from e
