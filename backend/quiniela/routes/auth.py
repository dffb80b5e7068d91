from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from starlette import status

from quiniela.config import config
from quiniela.models.db.user import UserPublic
from quiniela.sql.users import get_user_by_id
from quiniela.utils.id_types import UserId

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{config.api_prefix}/token")


class TokenData(BaseModel):
    user_id: UserId


def decode_access_token(token: str) -> TokenData | None:
    try:
        payload = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except JWTError:
        return None

    subject = payload.get("user_id", payload.get("sub"))
    if subject is None:
        return None
    try:
        return TokenData(user_id=UserId(int(subject)))
    except (TypeError, ValueError):
        return None


def is_admin_user(user_public: UserPublic) -> bool:
    return user_public.is_admin


async def user_authenticated(token: str = Depends(oauth2_scheme)) -> UserPublic:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token_data = decode_access_token(token)
    if token_data is None:
        raise credentials_exception

    user = await get_user_by_id(token_data.user_id)
    if user is None:
        raise credentials_exception
    return user


async def user_authenticated_admin(
    user_public: UserPublic = Depends(user_authenticated),
) -> UserPublic:
    if not is_admin_user(user_public):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Admin access required")
    return user_public
