from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from agenda.agendamentos import service
from agenda.agendamentos.schemas import Agendamento, AgendamentoInput, ResumoStatus
from agenda.core.security import Identity, get_current_identity
from agenda.db.repository import Repository
from agenda.db.session import get_repository

router = APIRouter(tags=["Agendamentos"])


@router.get("/agendamentos", response_model=list[Agendamento])
def list_agendamentos(
    status_filter: Optional[str] = Query(None, alias="status"),
    loja: Optional[str] = None,
    repo: Repository = Depends(get_repository),
    _identity: Identity = Depends(get_current_identity),
):
    return service.list_agendamentos(repo, status=status_filter, loja=loja)


@router.get("/agendamentos/resumo", response_model=ResumoStatus)
def resumo_agendamentos(
    repo: Repository = Depends(get_repository),
    _identity: Identity = Depends(get_current_identity),
):
    return service.resumo_status(repo)


@router.get("/agendamentos/{agendamento_id}", response_model=Agendamento)
def get_agendamento(
    agendamento_id: str,
    repo: Repository = Depends(get_repository),
    _identity: Identity = Depends(get_current_identity),
):
    return service.get_agendamento(repo, agendamento_id)


@router.post("/agendamentos", response_model=Agendamento, status_code=status.HTTP_201_CREATED)
def create_agendamento(
    payload: AgendamentoInput,
    repo: Repository = Depends(get_repository),
    identity: Identity = Depends(get_current_identity),
):
    return service.create_agendamento(repo, payload, created_by=identity.id)


@router.put("/agendamentos/{agendamento_id}", response_model=Agendamento)
def update_agendamento(
    agendamento_id: str,
    payload: AgendamentoInput,
    repo: Repository = Depends(get_repository),
    _identity: Identity = Depends(get_current_identity),
):
    return service.update_agendamento(repo, agendamento_id, payload)


@router.delete("/agendamentos/{agendamento_id}")
def delete_agendamento(
    agendamento_id: str,
    repo: Repository = Depends(get_repository),
    _identity: Identity = Depends(get_current_identity),
):
    service.delete_agendamento(repo, agendamento_id)
    return {"message": "Agendamento excluido com sucesso"}
