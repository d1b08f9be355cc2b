import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
import bcrypt

from ...core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from .exceptions import InvalidTokenError
from . import models

logger = logging.getLogger(__name__)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt())
    return hashed.decode('utf-8')


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    secret_key: str = SECRET_KEY,
    algorithm: str = ALGORITHM,
) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    now = datetime.now(timezone.utc)
    to_encode = {"sub": subject, "iat": now, "exp": now + expires_delta}
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


class TokenVerifier:
    """Maps a signed bearer token to its subject and checks it against a user."""

    def __init__(
        self,
        secret_key: str = SECRET_KEY,
        algorithm: str = ALGORITHM,
        access_token_expire_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes

    def create_token(self, subject: str, expires_delta: Optional[timedelta] = None) -> str:
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.access_token_expire_minutes)
        return create_access_token(
            subject, expires_delta, secret_key=self.secret_key, algorithm=self.algorithm
        )

    def get_claims(self, token: str) -> dict:
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e

    def get_username_from_token(self, token: str) -> str:
        sub = self.get_claims(token).get("sub")
        if not sub:
            raise InvalidTokenError("Token sub (username) is missing.")
        return sub

    def is_token_expired(self, token: str) -> bool:
        exp = self.get_claims(token).get("exp")
        if exp is None:
            return False
        return datetime.fromtimestamp(exp, tz=timezone.utc) < datetime.now(timezone.utc)

    def validate_token(self, token: str, user: models.User) -> bool:
        username = self.get_username_from_token(token)
        if username != user.username:
            logger.warning("Token subject %s does not match user %s", username, user.username)
            return False
        if not user.is_active:
            logger.warning("User %s is inactive.", user.username)
            return False
        return not self.is_token_expired(token)
