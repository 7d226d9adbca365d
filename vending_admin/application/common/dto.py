# caminho: vending_admin/application/common/dto.py
# Funções:
# - Envelope/MessageEnvelope/PageEnvelope: formato padrão das respostas de sucesso
# - PaginationMeta: {total, limit, offset, hasMore}
# - RequestContext: quem fez a requisição (claims, IP, user-agent) para auditoria
# - page_envelope(): converte Page em PageEnvelope
# - snapshot(): recorte serializável de um DTO para o log de atividades

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from vending_admin.domain.admins.entities import SessionClaims
from vending_admin.infrastructure.db.query_builder import Page

T = TypeVar('T')
S = TypeVar('S')


class PaginationMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    limit: int
    offset: int
    has_more: bool = Field(serialization_alias='hasMore')


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T


class MessageEnvelope(Envelope[T], Generic[T]):
    message: str


class PageEnvelope(BaseModel, Generic[T]):
    success: bool = True
    data: list[T]
    pagination: PaginationMeta


def map_page(page: Page[S], convert: Callable[[S], T]) -> Page[T]:
    return Page(items=[convert(item) for item in page.items], total=page.total, limit=page.limit, offset=page.offset)


def page_envelope(page: Page[T]) -> PageEnvelope[T]:
    return PageEnvelope[T](
        data=page.items,
        pagination=PaginationMeta(total=page.total, limit=page.limit, offset=page.offset, has_more=page.has_more),
    )


@dataclass(slots=True, frozen=True)
class RequestContext:
    claims: Optional[SessionClaims] = None
    ip_address: str = ''
    user_agent: str = ''

    @property
    def admin_id(self) -> Optional[str]:
        return self.claims.user_id if self.claims else None


def snapshot(output: BaseModel, keys: Iterable[str]) -> dict[str, Any]:
    """Valores serializáveis dos campos indicados, para old_values/new_values da auditoria."""
    data = output.model_dump(mode='json')
    return {key: data.get(key) for key in keys}
