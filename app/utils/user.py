from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from app.core.config import settings
from app.core.errors import AuthError, ForbiddenError
from app.schemas.user import User


def create_access_token(data: dict, expires_delta: timedelta = timedelta(hours=1)) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": datetime.now(UTC) + expires_delta})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> User:
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError:
        raise AuthError() from None

    user_id = payload.get("sub")
    if not user_id:
        raise AuthError()

    app_metadata = payload.get("app_metadata") or {}
    role = app_metadata.get("role") or payload.get("role")
    return User(id=user_id, email=payload.get("email"), role=role)


def verify_user_role(user: User, required_role: str = settings.ADMIN_ROLE) -> None:
    if user.role != required_role:
        raise ForbiddenError()
