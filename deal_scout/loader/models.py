"""
Data models for the DealScout loader.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Union

DealId = Union[int, str]


@dataclass(frozen=True, slots=True)
class Credential:
    """Target account domain and bearer token for one load session."""

    domain: str
    token: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class Deal:
    """A lead as returned by ``/api/v4/leads``."""

    id: DealId
    name: Optional[str] = None
    created_at: Optional[int] = None

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> Optional[Deal]:
        """Build a Deal from a raw lead mapping; None when it has no id."""
        deal_id = raw.get("id")
        if deal_id is None:
            return None
        return cls(id=deal_id, name=raw.get("name") or None, created_at=raw.get("created_at") or None)

    @property
    def title(self) -> str:
        return self.name or "Untitled"

    @property
    def created_display(self) -> str:
        if not self.created_at:
            return ""
        return datetime.fromtimestamp(self.created_at).strftime("%d.%m.%Y")

    def as_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "created_at": self.created_at}


class TaskStatus(str, Enum):
    """Индикатор срока задачи и его цвет в интерфейсе."""

    RED = "red"
    GREEN = "green"
    AMBER = "amber"

    @property
    def color(self) -> str:
        return _STATUS_COLORS[self]


_STATUS_COLORS = {
    TaskStatus.RED: "#ff0000",
    TaskStatus.GREEN: "#4CAF50",
    TaskStatus.AMBER: "#FFC107",
}


@dataclass(frozen=True, slots=True)
class TaskView:
    """A task prepared for display in the expanded deal panel."""

    text: str
    complete_till: Optional[int]
    complete_till_display: str
    status: TaskStatus

    @property
    def status_color(self) -> str:
        return self.status.color

    def as_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "complete_till": self.complete_till,
            "complete_till_display": self.complete_till_display,
            "status": self.status.value,
        }
