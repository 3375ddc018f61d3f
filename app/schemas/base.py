"""
Base dos esquemas da API.

O painel troca JSON em camelCase (clientId, createdAt);
a entrada também aceita snake_case.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
