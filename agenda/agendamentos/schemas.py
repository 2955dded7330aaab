from datetime import date, datetime, time
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

STATUS_VALIDOS = ("pendente", "confirmado", "cancelado", "concluido", "agendar")
STATUS_PADRAO = "pendente"
SERVICO_PADRAO = "Medição Padrão"

StatusAgendamento = Literal["pendente", "confirmado", "cancelado", "concluido", "agendar"]

# Free-text fields that fall back to an empty string.
CAMPOS_TEXTO = (
    "telefone",
    "email",
    "tipo_imovel",
    "cep",
    "endereco",
    "numero",
    "complemento",
    "bairro",
    "cidade",
    "estado",
    "observacoes",
)
CAMPOS_OBRIGATORIOS = ("nome_cliente", "loja")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AgendamentoInput(CamelModel):
    """Body of POST and PUT. Everything is optional so the service can report
    every missing required field at once and tell unset fields from nulls."""

    nome_cliente: Optional[str] = None
    loja: Optional[str] = None
    data: Optional[date] = None
    hora: Optional[time] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    tipo_imovel: Optional[str] = None
    ambientes: Optional[list[str]] = None
    cep: Optional[str] = None
    endereco: Optional[str] = None
    numero: Optional[str] = None
    complemento: Optional[str] = None
    bairro: Optional[str] = None
    cidade: Optional[str] = None
    estado: Optional[str] = None
    servico: Optional[str] = None
    observacoes: Optional[str] = None
    status: Optional[str] = None

    @field_validator("hora")
    @classmethod
    def hora_sem_fuso(cls, value: Optional[time]) -> Optional[time]:
        if value is not None and value.tzinfo is not None:
            raise ValueError("hora deve ser local, sem fuso horario")
        return value


class Agendamento(CamelModel):
    id: str
    nome_cliente: str
    loja: str
    data: Optional[date] = None
    hora: Optional[time] = None
    telefone: str = ""
    email: str = ""
    tipo_imovel: str = ""
    ambientes: list[str] = Field(default_factory=list)
    cep: str = ""
    endereco: str = ""
    numero: str = ""
    complemento: str = ""
    bairro: str = ""
    cidade: str = ""
    estado: str = ""
    servico: str = SERVICO_PADRAO
    observacoes: str = ""
    status: StatusAgendamento = STATUS_PADRAO
    created_by: Optional[str] = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class ResumoStatus(BaseModel):
    total: int = 0
    pendente: int = 0
    confirmado: int = 0
    cancelado: int = 0
    concluido: int = 0
    agendar: int = 0
