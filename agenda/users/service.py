import logging
import uuid
from datetime import datetime

from agenda.core.errors import Conflict, InvalidCredentials, NotFound, ValidationError
from agenda.core.security import (
    ROLE_USER,
    ROLES,
    Identity,
    dummy_verify,
    get_password_hash,
    verify_password,
)
from agenda.db.repository import USERS, Repository
from agenda.users.schemas import UserCreate, UserOut, UserRecord, UserUpdate

logger = logging.getLogger("agenda.users")


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


def _validate_role(role: str) -> str:
    if role not in ROLES:
        raise ValidationError(
            f"Perfil invalido. Perfis permitidos: {', '.join(ROLES)}", fields=["role"]
        )
    return role


def _email_taken(repo: Repository, email: str, exclude_id: str | None = None) -> bool:
    for record in repo.find_all(USERS, {"email": email, "is_active": True}):
        if record["id"] != exclude_id:
            return True
    return False


def _get_record(repo: Repository, user_id: str) -> UserRecord:
    record = repo.find(USERS, user_id)
    if not record:
        raise NotFound("Usuario nao encontrado")
    return UserRecord.model_validate(record)


def find_active_by_email(repo: Repository, email: str) -> UserRecord | None:
    record = repo.find_one(USERS, {"email": normalize_email(email), "is_active": True})
    return UserRecord.model_validate(record) if record else None


def create_user(repo: Repository, payload: UserCreate) -> UserOut:
    nome = (payload.nome or "").strip()
    email = normalize_email(payload.email)
    missing = [
        field
        for field, value in (("nome", nome), ("email", email), ("senha", payload.senha))
        if not value
    ]
    if missing:
        raise ValidationError(f"Campos obrigatorios: {', '.join(missing)}", fields=missing)
    role = _validate_role(payload.role or ROLE_USER)
    if _email_taken(repo, email):
        raise Conflict("Ja existe um usuario ativo com este email")

    now = datetime.utcnow()
    record = UserRecord(
        id=str(uuid.uuid4()),
        nome=nome,
        email=email,
        password_hash=get_password_hash(payload.senha),
        role=role,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    repo.insert(USERS, record.model_dump())
    logger.info("user created id=%s role=%s", record.id, record.role)
    return UserOut.from_record(record)


def list_users(repo: Repository) -> list[UserOut]:
    records = repo.find_all(USERS, {"is_active": True}, order_by="created_at", descending=True)
    return [UserOut.from_record(UserRecord.model_validate(record)) for record in records]


def update_user(repo: Repository, user_id: str, payload: UserUpdate) -> UserOut:
    current = _get_record(repo, user_id)
    changes = payload.model_dump(exclude_unset=True)
    fields: dict = {}

    if "nome" in changes:
        nome = (changes["nome"] or "").strip()
        if not nome:
            raise ValidationError("Nome nao pode ficar vazio", fields=["nome"])
        fields["nome"] = nome
    if "email" in changes:
        email = normalize_email(changes["email"])
        if not email:
            raise ValidationError("Email nao pode ficar vazio", fields=["email"])
        fields["email"] = email
    if changes.get("role") is not None:
        fields["role"] = _validate_role(changes["role"])
    if changes.get("is_active") is not None:
        fields["is_active"] = changes["is_active"]
    if changes.get("senha"):
        fields["password_hash"] = get_password_hash(changes["senha"])

    becomes_active = fields.get("is_active", current.is_active)
    email = fields.get("email", current.email)
    if becomes_active and (email != current.email or not current.is_active):
        if _email_taken(repo, email, exclude_id=current.id):
            raise Conflict("Ja existe um usuario ativo com este email")

    fields["updated_at"] = datetime.utcnow()
    stored = repo.update(USERS, user_id, fields)
    if stored is None:
        raise NotFound("Usuario nao encontrado")
    logger.info("user updated id=%s fields=%s", user_id, sorted(set(fields) - {"password_hash"}))
    return UserOut.from_record(UserRecord.model_validate(stored))


def delete_user(repo: Repository, user_id: str) -> None:
    current = _get_record(repo, user_id)
    if not current.is_active:
        raise NotFound("Usuario nao encontrado")
    repo.update(USERS, user_id, {"is_active": False, "updated_at": datetime.utcnow()})
    logger.info("user deactivated id=%s", user_id)


def get_self(repo: Repository, identity: Identity) -> UserOut:
    record = repo.find(USERS, identity.id)
    if not record or not record.get("is_active"):
        raise NotFound("Usuario nao encontrado")
    return UserOut.from_record(UserRecord.model_validate(record))


def authenticate(repo: Repository, handle: str, password: str) -> UserRecord:
    if not (handle or "").strip() or not password:
        raise ValidationError("Usuario e senha sao obrigatorios", fields=["handle", "password"])
    user = find_active_by_email(repo, handle)
    if user is None:
        dummy_verify()
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("login failed handle=%s", normalize_email(handle))
        raise InvalidCredentials()
    return user
