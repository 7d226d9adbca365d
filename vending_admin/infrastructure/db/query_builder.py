# caminho: vending_admin/infrastructure/db/query_builder.py
# Funções:
# - FilterColumn/QueryableResource: allow-list de colunas filtráveis, pesquisáveis e ordenação fixa
# - build_predicates(): traduz a especificação em predicados (igualdade, faixa, busca)
# - build_list_query(): monta SELECT paginado + COUNT com os mesmos predicados
# - fetch_page(): executa as duas consultas e devolve Page

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeVar

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vending_admin.shared.filters import PageFilters

T = TypeVar('T')

LIKE_ESCAPE = '\\'


def as_bool_flag(value: str) -> bool:
    return value == 'true'


@dataclass(frozen=True, slots=True)
class FilterColumn:
    column: Any
    operator: Literal['eq', 'gte', 'lte'] = 'eq'
    transform: Callable[[Any], Any] | None = None

    def predicate(self, value: Any) -> ColumnElement[bool]:
        if self.transform is not None:
            value = self.transform(value)
        if self.operator == 'gte':
            return self.column >= value
        if self.operator == 'lte':
            return self.column <= value
        return self.column == value


@dataclass(frozen=True)
class QueryableResource:
    model: Any
    order_by: Sequence[Any]
    filters: Mapping[str, FilterColumn] = field(default_factory=dict)
    search_columns: Sequence[Any] = ()
    base_criteria: Sequence[ColumnElement[bool]] = ()
    options: Sequence[Any] = ()


@dataclass(frozen=True)
class ListQuery:
    statement: Select
    count_statement: Select
    predicates: tuple[ColumnElement[bool], ...]
    limit: int
    offset: int


@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total


def _escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace('%', f'{LIKE_ESCAPE}%')
        .replace('_', f'{LIKE_ESCAPE}_')
    )


def build_predicates(filters: PageFilters, resource: QueryableResource) -> tuple[ColumnElement[bool], ...]:
    predicates: list[ColumnElement[bool]] = list(resource.base_criteria)

    for field_name, filter_column in resource.filters.items():
        value = getattr(filters, field_name, None)
        if value is None:
            continue
        predicates.append(filter_column.predicate(value))

    search = getattr(filters, 'search', None)
    if search and resource.search_columns:
        pattern = f'%{_escape_like(search)}%'
        predicates.append(or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in resource.search_columns)))

    return tuple(predicates)


def build_list_query(filters: PageFilters, resource: QueryableResource) -> ListQuery:
    predicates = build_predicates(filters, resource)

    statement = (
        select(resource.model)
        .where(*predicates)
        .order_by(*resource.order_by)
        .limit(filters.limit)
        .offset(filters.offset)
    )
    if resource.options:
        statement = statement.options(*resource.options)

    count_statement = select(func.count()).select_from(resource.model).where(*predicates)

    return ListQuery(
        statement=statement,
        count_statement=count_statement,
        predicates=predicates,
        limit=filters.limit,
        offset=filters.offset,
    )


async def fetch_page(session: AsyncSession, query: ListQuery) -> Page[Any]:
    total = (await session.execute(query.count_statement)).scalar_one()
    result = await session.execute(query.statement)
    items = list(result.scalars().unique().all())
    return Page(items=items, total=int(total or 0), limit=query.limit, offset=query.offset)
