"""Common Schemas — camelCase base model and shapes shared by several resources.

Invariants:
    - JSON leaves the API in camelCase (by_alias), snake_case accepted on input
    - visible_pages items are page numbers or the "..." gap marker

Design Decisions:
    - alias_generator over hand-written aliases: one rule, no drift between fields
      (ADR: the SPA was written against camelCase payloads)
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every API contract: camelCase aliases, snake_case names accepted."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LinkIn(CamelModel):
    name: str = Field("", max_length=255)
    url: str = Field("", max_length=2000)


class LinkView(CamelModel):
    name: str
    url: str


class PaginationMeta(CamelModel):
    page: int
    per_page: int
    total_items: int
    total_pages: int
    has_next: bool
    has_previous: bool
    start_item: int
    end_item: int
    visible_pages: list[int | str]


class MutationResult(CamelModel):
    """Write response — data is ORCID-shaped JSON and keeps ORCID's own key names."""
    message: str
    data: dict[str, Any]
