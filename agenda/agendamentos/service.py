import logging
import uuid
from datetime import datetime
from typing import Any, Optional

from agenda.agendamentos.schemas import (
    CAMPOS_OBRIGATORIOS,
    CAMPOS_TEXTO,
    SERVICO_PADRAO,
    STATUS_PADRAO,
    STATUS_VALIDOS,
    Agendamento,
    AgendamentoInput,
    ResumoStatus,
)
from agenda.core.errors import NotFound, ValidationError
from agenda.db.repository import AGENDAMENTOS, Repository

logger = logging.getLogger("agenda.agendamentos")


def _json_name(field: str) -> str:
    return AgendamentoInput.model_fields[field].alias or field


def validate_status(status: Any) -> str:
    if status not in STATUS_VALIDOS:
        raise ValidationError(
            f"Status invalido. Status permitidos: {', '.join(STATUS_VALIDOS)}",
            fields=["status"],
        )
    return status


def _clean_ambientes(values: Optional[list[str]]) -> list[str]:
    cleaned: list[str] = []
    for value in values or []:
        name = (value or "").strip()
        if name and name not in cleaned:
            cleaned.append(name)
    return cleaned


def _normalize(changes: dict[str, Any]) -> dict[str, Any]:
    """Turn explicit nulls into defaults and validate what is present."""
    fields: dict[str, Any] = {}
    for field, value in changes.items():
        if field in CAMPOS_OBRIGATORIOS:
            fields[field] = (value or "").strip()
        elif field in CAMPOS_TEXTO:
            fields[field] = value if value is not None else ""
        elif field == "ambientes":
            fields[field] = _clean_ambientes(value)
        elif field == "servico":
            fields[field] = (value or "").strip() or SERVICO_PADRAO
        elif field == "status":
            fields[field] = validate_status(value if value is not None else STATUS_PADRAO)
        else:
            fields[field] = value
    return fields


def _require(fields: dict[str, Any], names) -> None:
    missing = [_json_name(name) for name in names if not fields.get(name)]
    if missing:
        raise ValidationError(f"Campos obrigatorios: {', '.join(missing)}", fields=missing)


def _get_active(repo: Repository, agendamento_id: str) -> Agendamento:
    record = repo.find(AGENDAMENTOS, agendamento_id)
    if not record or not record.get("is_active", True):
        raise NotFound("Agendamento nao encontrado")
    return Agendamento.model_validate(record)


def create_agendamento(
    repo: Repository, payload: AgendamentoInput, created_by: Optional[str] = None
) -> Agendamento:
    fields = _normalize(payload.model_dump())
    _require(fields, CAMPOS_OBRIGATORIOS)

    now = datetime.utcnow()
    agendamento = Agendamento(
        id=str(uuid.uuid4()),
        created_by=created_by,
        is_active=True,
        created_at=now,
        updated_at=now,
        **fields,
    )
    repo.insert(AGENDAMENTOS, agendamento.model_dump())
    logger.info(
        "agendamento created id=%s loja=%s status=%s",
        agendamento.id,
        agendamento.loja,
        agendamento.status,
    )
    return agendamento


def list_agendamentos(
    repo: Repository, status: Optional[str] = None, loja: Optional[str] = None
) -> list[Agendamento]:
    filters: dict[str, Any] = {"is_active": True}
    if status is not None:
        filters["status"] = validate_status(status)
    if loja:
        filters["loja"] = loja
    records = repo.find_all(AGENDAMENTOS, filters, order_by="created_at", descending=True)
    return [Agendamento.model_validate(record) for record in records]


def get_agendamento(repo: Repository, agendamento_id: str) -> Agendamento:
    return _get_active(repo, agendamento_id)


def update_agendamento(repo: Repository, agendamento_id: str, payload: AgendamentoInput) -> Agendamento:
    _get_active(repo, agendamento_id)
    fields = _normalize(payload.model_dump(exclude_unset=True))
    _require(fields, [name for name in CAMPOS_OBRIGATORIOS if name in fields])
    fields["updated_at"] = datetime.utcnow()

    stored = repo.update(AGENDAMENTOS, agendamento_id, fields)
    if stored is None:
        raise NotFound("Agendamento nao encontrado")
    logger.info("agendamento updated id=%s fields=%s", agendamento_id, sorted(fields))
    return Agendamento.model_validate(stored)


def delete_agendamento(repo: Repository, agendamento_id: str) -> None:
    _get_active(repo, agendamento_id)
    repo.update(AGENDAMENTOS, agendamento_id, {"is_active": False, "updated_at": datetime.utcnow()})
    logger.info("agendamento deactivated id=%s", agendamento_id)


def resumo_status(repo: Repository) -> ResumoStatus:
    counts = dict.fromkeys(STATUS_VALIDOS, 0)
    records = repo.find_all(AGENDAMENTOS, {"is_active": True})
    for record in records:
        status = record.get("status")
        if status in counts:
            counts[status] += 1
    return ResumoStatus(total=len(records), **counts)
