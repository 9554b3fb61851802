"""
Queued units of fetch work. A job knows which upstream URL it needs.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from deal_scout.loader.models import DealId


@dataclass(frozen=True, slots=True)
class DealsPage:
    """One page of ``/api/v4/leads``."""

    domain: str
    credential: str = field(repr=False)
    page: int = 1

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")

    def url(self, page_size: int) -> str:
        return f"https://{self.domain}/api/v4/leads?page={self.page}&limit={page_size}"

    def describe(self) -> str:
        return f"deals page {self.page}"


@dataclass(frozen=True, slots=True)
class TasksForDeal:
    """Tasks attached to a single lead."""

    domain: str
    credential: str = field(repr=False)
    deal_id: DealId

    def url(self) -> str:
        return (
            f"https://{self.domain}/api/v4/tasks"
            f"?filter[entity_id]={self.deal_id}&filter[entity_type]=lead"
        )

    def describe(self) -> str:
        return f"tasks for deal {self.deal_id}"


Job = Union[DealsPage, TasksForDeal]
