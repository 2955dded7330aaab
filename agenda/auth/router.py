import logging

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field

from agenda.core.security import Identity, get_current_identity, issue_token
from agenda.db.repository import Repository
from agenda.db.session import get_repository
from agenda.users import service as users_service
from agenda.users.schemas import UserOut

router = APIRouter(tags=["Auth"])
logger = logging.getLogger("agenda.auth")


class LoginRequest(BaseModel):
    handle: str = Field(validation_alias=AliasChoices("handle", "email", "username", "usuario"))
    password: str = Field(validation_alias=AliasChoices("password", "senha"))


class LoginResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserOut


@router.post("/auth/login", response_model=LoginResponse, summary="Login por email e senha")
def login(payload: LoginRequest, repo: Repository = Depends(get_repository)):
    """
    - POST /api/auth/login
    - body: {"handle": "admin@agenda.com", "password": "..."}

    O token expira em 24h e deve ser enviado como ``Authorization: Bearer <token>``.
    """
    user = users_service.authenticate(repo, payload.handle, payload.password)
    token = issue_token(user.id, user.email, user.role)
    logger.info("login ok user_id=%s role=%s", user.id, user.role)
    return {
        "message": "Login realizado com sucesso",
        "token": token,
        "token_type": "bearer",
        "user": UserOut.from_record(user),
    }


@router.get("/auth/me", response_model=UserOut)
def get_me(
    identity: Identity = Depends(get_current_identity),
    repo: Repository = Depends(get_repository),
):
    return users_service.get_self(repo, identity)
