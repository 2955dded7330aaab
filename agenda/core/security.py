from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from agenda.core.config import settings
from agenda.core.errors import Forbidden, InvalidToken, MissingToken, ValidationError
from agenda.db.repository import USERS, Repository
from agenda.db.session import get_repository

ROLE_ADMIN = "admin"
ROLE_USER = "user"
ROLES = (ROLE_ADMIN, ROLE_USER)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    id: str
    email: str
    role: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def dummy_verify() -> None:
    """Spend the same bcrypt time as a real check when no user matched."""
    pwd_context.dummy_verify()


def get_password_hash(password: str) -> str:
    if not isinstance(password, str) or not password:
        raise ValidationError("Senha obrigatoria", fields=["senha"])
    if len(password.encode("utf-8")) > 72:
        raise ValidationError("Senha maior que 72 bytes em UTF-8", fields=["senha"])
    return pwd_context.hash(password)


def create_access_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def issue_token(user_id: str, email: str, role: str) -> str:
    return create_access_token({"sub": user_id, "email": email, "role": role})


def decode_access_token(token: str) -> Identity:
    if not token:
        raise MissingToken()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise InvalidToken()
    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or role not in ROLES:
        raise InvalidToken()
    return Identity(id=user_id, email=payload.get("email") or "", role=role)


def ensure_role(identity: Identity, role: str) -> None:
    if identity.role != role:
        raise Forbidden("Acesso restrito a administradores" if role == ROLE_ADMIN else None)


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    repo: Repository = Depends(get_repository),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise MissingToken()
    claims = decode_access_token(credentials.credentials)
    user = repo.find(USERS, claims.id)
    if not user:
        raise InvalidToken()
    if not user.get("is_active"):
        raise Forbidden("Usuario inativo")
    return Identity(id=user["id"], email=user["email"], role=user["role"])


def require_role(role: str):
    def _dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        ensure_role(identity, role)
        return identity

    return _dependency


require_admin = require_role(ROLE_ADMIN)
