from fastapi import APIRouter, Depends, status

from agenda.core.security import Identity, require_admin
from agenda.db.repository import Repository
from agenda.db.session import get_repository
from agenda.users import service
from agenda.users.schemas import UserCreate, UserOut, UserUpdate

router = APIRouter(tags=["Usuarios"])


@router.get("/users", response_model=list[UserOut])
def list_users(
    repo: Repository = Depends(get_repository),
    _admin: Identity = Depends(require_admin),
):
    return service.list_users(repo)


@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    repo: Repository = Depends(get_repository),
    _admin: Identity = Depends(require_admin),
):
    return service.create_user(repo, payload)


@router.put("/users/{user_id}", response_model=UserOut)
def update_user(
    user_id: str,
    payload: UserUpdate,
    repo: Repository = Depends(get_repository),
    _admin: Identity = Depends(require_admin),
):
    return service.update_user(repo, user_id, payload)


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    repo: Repository = Depends(get_repository),
    _admin: Identity = Depends(require_admin),
):
    service.delete_user(repo, user_id)
    return {"message": "Usuario desativado com sucesso"}
