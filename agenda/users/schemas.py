from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserCreate(BaseModel):
    nome: Optional[str] = Field(default=None, validation_alias=AliasChoices("nome", "name"))
    email: Optional[str] = None
    senha: Optional[str] = Field(default=None, validation_alias=AliasChoices("senha", "password"))
    role: Optional[str] = None


class UserUpdate(BaseModel):
    nome: Optional[str] = Field(default=None, validation_alias=AliasChoices("nome", "name"))
    email: Optional[str] = None
    senha: Optional[str] = Field(default=None, validation_alias=AliasChoices("senha", "password"))
    role: Optional[str] = None
    is_active: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("isActive", "ativo", "is_active")
    )


class UserRecord(BaseModel):
    """Stored shape of a user, hash included. Never returned by the API."""

    id: str
    nome: str
    email: str
    password_hash: str
    role: str = "user"
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class UserOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    nome: str
    email: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserOut":
        return cls.model_validate(record.model_dump(exclude={"password_hash"}))
