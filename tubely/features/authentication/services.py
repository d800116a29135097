import uuid
from typing import Optional

from jose import JWTError

from tubely.core.errors import Unauthenticated
from tubely.security.tokens import JWTSettings, decode_token


class AuthService:
    """
    Service d'authentification : valide un access token et rend l'identité de l'appelant.
    L'émission des tokens (sign-in, refresh) est hors de ce service.
    """

    def __init__(self, *, jwt_settings: JWTSettings):
        self.jwt = jwt_settings

    def authenticate(self, access_token: Optional[str]) -> uuid.UUID:
        if not access_token:
            raise Unauthenticated("Missing token")

        try:
            decoded = decode_token(access_token, self.jwt)
        except JWTError:
            raise Unauthenticated("Invalid token")

        if decoded.get("typ") != "access":
            raise Unauthenticated("Invalid token type")

        try:
            return uuid.UUID(str(decoded.get("sub")))
        except ValueError:
            raise Unauthenticated("Invalid token subject")
