# storefront/services/features.py
# Общие возможности списочных запросов: фильтр, сортировка, выбор полей, пагинация.
import math
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Query

from storefront.core.errors import ValidationError


@dataclass
class Pagination:
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page:
    items: list[Any]
    total: int
    pagination: Pagination

    @property
    def total_pages(self) -> int:
        return total_pages(self.total, self.pagination.limit)


def total_pages(total: int, limit: int) -> int:
    """Количество страниц, округление вверх."""
    return math.ceil(total / limit)


@dataclass
class QueryFeatures:
    """Пошагово дополняет SQLAlchemy Query параметрами из строки запроса.

    filterable и sortable отображают camelCase-имена параметров на колонки модели;
    неизвестные параметры фильтра игнорируются, неизвестные поля сортировки дают 400.
    """

    query: Query
    params: dict[str, Any]
    filterable: dict[str, Any] = field(default_factory=dict)
    sortable: dict[str, Any] = field(default_factory=dict)

    def filter(self) -> "QueryFeatures":
        for name, column in self.filterable.items():
            value = self.params.get(name)
            if value is not None and value != "":
                self.query = self.query.filter(column == value)
        return self

    def sort(self, default: str = "-createdAt") -> "QueryFeatures":
        raw = self.params.get("sort") or default
        clauses = []
        for token in (part.strip() for part in raw.split(",")):
            if not token:
                continue
            descending = token.startswith("-")
            name = token.lstrip("-")
            column = self.sortable.get(name)
            if column is None:
                raise ValidationError(f"Cannot sort by '{name}'")
            clauses.append(column.desc() if descending else column.asc())
        if clauses:
            self.query = self.query.order_by(*clauses)
        return self

    def paginate(self, pagination: Pagination) -> "QueryFeatures":
        self.query = self.query.offset(pagination.offset).limit(pagination.limit)
        return self

    def all(self) -> list[Any]:
        return self.query.all()


def limit_fields(data: dict, fields: str | None) -> dict:
    """Оставляет в ответе только перечисленные поля (плюс id)."""
    if not fields:
        return data
    wanted = {name.strip() for name in fields.split(",") if name.strip()}
    wanted.add("id")
    return {key: value for key, value in data.items() if key in wanted}
