from typing import Iterable


class AgendaError(Exception):
    """Base for every error the API turns into a JSON ``{"error": ...}`` body."""

    status_code = 500
    default_message = "Erro interno do servidor"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def code(self) -> str:
        return type(self).__name__


class ValidationError(AgendaError):
    status_code = 400
    default_message = "Dados invalidos"

    def __init__(self, message: str | None = None, fields: Iterable[str] | None = None) -> None:
        super().__init__(message)
        self.fields = list(fields or [])


class InvalidCredentials(AgendaError):
    status_code = 401
    default_message = "Usuario ou senha invalidos"


class MissingToken(AgendaError):
    status_code = 401
    default_message = "Token de acesso obrigatorio"


class InvalidToken(AgendaError):
    status_code = 401
    default_message = "Token invalido ou expirado"


class Forbidden(AgendaError):
    status_code = 403
    default_message = "Permissao negada"


class NotFound(AgendaError):
    status_code = 404
    default_message = "Registro nao encontrado"


class Conflict(AgendaError):
    status_code = 409
    default_message = "Registro ja existe"


class StorageError(AgendaError):
    status_code = 500
    default_message = "Falha no armazenamento"
