"""
身份认证模块
校验身份服务签发的Bearer JWT，提取当前用户
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from draw2real.core.config import settings
from draw2real.core.log_utils import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """已认证用户"""
    id: str
    email: Optional[str] = None


def create_access_token(
    user_id: str,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """签发访问令牌（供本地开发与测试使用，生产环境由身份服务签发）"""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims: Dict[str, Any] = {"sub": user_id, "exp": expire}
    if email:
        claims["email"] = email
    if settings.auth_audience:
        claims["aud"] = settings.auth_audience
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> CurrentUser:
    """
    解码并校验访问令牌

    Raises:
        JWTError: 签名、过期或audience校验失败，或缺少sub
    """
    options = {"verify_aud": bool(settings.auth_audience)}
    payload = jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
        audience=settings.auth_audience,
        options=options
    )
    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Token has no subject")
    return CurrentUser(id=str(user_id), email=payload.get("email"))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> CurrentUser:
    """FastAPI依赖：要求请求携带有效的Bearer令牌"""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Please sign in to continue",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise unauthorized

    try:
        return decode_access_token(credentials.credentials)
    except JWTError as e:
        logger.warning("访问令牌校验失败: {reason}", reason=str(e))
        raise unauthorized from e
