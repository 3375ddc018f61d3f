"""
Erros de domínio.

Cada erro carrega o status HTTP e a mensagem exibida ao cliente;
os handlers registrados em app.main os convertem em {"message": ...}.
"""

from typing import List, Optional


class AppError(Exception):
    """Base de todos os erros tratados pela API."""
    status_code = 500
    default_message = "Erro interno do servidor"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(AppError):
    """Campos ausentes ou malformados na requisição."""
    status_code = 400
    default_message = "Dados inválidos"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


class ParseError(ValidationError):
    """Valor monetário que não pôde ser convertido em decimal."""
    default_message = "Valor monetário inválido"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Não autenticado"


class PermissionDeniedError(AppError):
    status_code = 403
    default_message = "Acesso negado"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Registro não encontrado"


class ConflictError(AppError):
    status_code = 409
    default_message = "Registro duplicado"


class PersistenceError(AppError):
    """Falha de banco de dados. A mensagem ao cliente é sempre genérica."""
    status_code = 500
    default_message = "Erro interno do servidor"


def format_validation_errors(errors: List[dict]) -> List[dict]:
    """Converte erros do pydantic em [{field, message}]."""
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        formatted.append({"field": ".".join(loc) or "body", "message": error.get("msg", "inválido")})
    return formatted
