import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, Index, JSON, String, Text, Time
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class User(Base):
    __tablename__ = "users"
    __table_args__ = (Index("ix_users_email_active", "email", "is_active"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    nome = Column(String, nullable=False)
    email = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Agendamento(Base):
    __tablename__ = "agendamentos"
    __table_args__ = (Index("ix_agendamentos_active_created", "is_active", "created_at"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    nome_cliente = Column(String, nullable=False)
    loja = Column(String, nullable=False)
    data = Column(Date, nullable=True)
    hora = Column(Time, nullable=True)
    telefone = Column(String, nullable=False, default="")
    email = Column(String, nullable=False, default="")
    tipo_imovel = Column(String, nullable=False, default="")
    ambientes = Column(JSON, nullable=False, default=list)
    cep = Column(String, nullable=False, default="")
    endereco = Column(Text, nullable=False, default="")
    numero = Column(String, nullable=False, default="")
    complemento = Column(Text, nullable=False, default="")
    bairro = Column(String, nullable=False, default="")
    cidade = Column(String, nullable=False, default="")
    estado = Column(String, nullable=False, default="")
    servico = Column(String, nullable=False)
    observacoes = Column(Text, nullable=False, default="")
    status = Column(String, nullable=False, default="pendente", index=True)
    created_by = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)


MODELS = {
    User.__tablename__: User,
    Agendamento.__tablename__: Agendamento,
}
