# File: deal_scout/aggregator.py
"""deal_scout.aggregator: Сводный отчёт по одной сессии загрузки."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from deal_scout.loader.models import Deal, DealId, TaskView
from deal_scout.loader.session import SessionState
from deal_scout.presenter import RecordingPresenter, Severity


@dataclass(slots=True)
class LoadReport:
    """Deals of a finished session, tasks of the deals that were opened, and status."""

    domain: str = ""
    deals: List[Deal] = field(default_factory=list)
    tasks: Dict[DealId, List[TaskView]] = field(default_factory=dict)
    failed_task_deals: List[DealId] = field(default_factory=list)
    complete: bool = False
    message: Optional[str] = None
    error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "complete": self.complete,
            "message": self.message,
            "error": self.error,
            "deals": [
                {
                    **deal.as_dict(),
                    "created_display": deal.created_display,
                    "tasks": [task.as_dict() for task in self.tasks.get(deal.id, [])],
                    "tasks_failed": deal.id in self.failed_task_deals,
                }
                for deal in self.deals
            ],
        }

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def build_report(session: SessionState, presenter: RecordingPresenter) -> LoadReport:
    """Собирает LoadReport из состояния сессии и того, что видел презентер."""
    text, error = None, False
    if presenter.message is not None:
        text = presenter.message[0]
        error = presenter.message[1] is Severity.ERROR
    listed = [deal.id for deal in session.deals]
    return LoadReport(
        domain=session.credential.domain if session.credential else "",
        deals=list(session.deals),
        tasks={deal_id: tasks for deal_id, tasks in presenter.tasks.items() if deal_id in session.seen_ids},
        failed_task_deals=[deal_id for deal_id in listed if deal_id in presenter.retry_deals],
        complete=session.last_page,
        message=text,
        error=error,
    )
