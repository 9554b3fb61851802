# File: deal_scout/loader/materializer.py
"""deal_scout.loader.materializer: Превращает сырые ответы API в сделки и задачи для отображения."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Iterable, List, Mapping, Optional

from deal_scout.loader.jobs import Job, TasksForDeal
from deal_scout.loader.models import Deal, DealId, TaskStatus, TaskView
from deal_scout.loader.session import SessionState
from deal_scout.logger import logger
from deal_scout.presenter import Presenter

__all__ = ["Materializer", "task_status", "build_task_views", "embedded_items", "has_next_page"]


def embedded_items(payload: Any, key: str) -> List[Mapping[str, Any]]:
    """Достаёт ``payload["_embedded"][key]``; пустой список, если чего-то нет."""
    if not isinstance(payload, Mapping):
        return []
    embedded = payload.get("_embedded")
    if not isinstance(embedded, Mapping):
        return []
    items = embedded.get(key)
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, Mapping)]


def has_next_page(payload: Any) -> bool:
    if not isinstance(payload, Mapping):
        return False
    links = payload.get("_links")
    return isinstance(links, Mapping) and bool(links.get("next"))


def task_status(complete_till: Optional[int], now: Optional[datetime] = None) -> TaskStatus:
    """Red when overdue, green when due later today, amber otherwise (including no due date)."""
    if not complete_till:
        return TaskStatus.AMBER
    now = now or datetime.now()
    if complete_till < now.timestamp():
        return TaskStatus.RED
    if datetime.fromtimestamp(complete_till).date() == now.date():
        return TaskStatus.GREEN
    return TaskStatus.AMBER


def _display_datetime(timestamp: Optional[int]) -> str:
    if not timestamp:
        return ""
    return datetime.fromtimestamp(timestamp).strftime("%d.%m.%Y, %H:%M:%S")


def build_task_views(raw_tasks: Iterable[Mapping[str, Any]], now: Optional[datetime] = None) -> List[TaskView]:
    """Sort by due time (undated first) and attach a status to each task."""
    now = now or datetime.now()
    ordered = sorted(raw_tasks, key=lambda task: task.get("complete_till") or 0)
    return [
        TaskView(
            text=task.get("text") or "No description",
            complete_till=task.get("complete_till") or None,
            complete_till_display=_display_datetime(task.get("complete_till")),
            status=task_status(task.get("complete_till"), now),
        )
        for task in ordered
    ]


class Materializer:
    """Keeps the session's deal list de-duplicated and the presenter in sync."""

    def __init__(self, presenter: Presenter, enqueue: Callable[[Job], None]) -> None:
        self.presenter = presenter
        self._enqueue = enqueue

    def ingest_deals_page(self, session: SessionState, raw_leads: Iterable[Mapping[str, Any]]) -> List[Deal]:
        """Append unseen deals in server order; re-render only when something was added."""
        fresh: List[Deal] = []
        for raw in raw_leads:
            deal = Deal.from_payload(raw)
            if deal is None:
                logger.debug("Skipping lead without id: %r", raw)
                continue
            if deal.id in session.seen_ids:
                continue
            session.seen_ids.add(deal.id)
            fresh.append(deal)

        if fresh:
            session.deals.extend(fresh)
            logger.info("Added %d deals (%d total)", len(fresh), len(session.deals))
            self._render_deals(session)
        return fresh

    def _render_deals(self, session: SessionState) -> None:
        expanded = session.expanded_deal_id
        if expanded is not None and not session.has_deal(expanded):
            expanded = None
        session.expanded_deal_id = expanded
        self.presenter.render_deals(session.deals, expanded)

        # the redraw empties the open panel, so fetch its tasks again
        if expanded is not None and session.credential is not None:
            self._enqueue(TasksForDeal(session.credential.domain, session.credential.token, expanded))

    def ingest_tasks(
        self,
        session: SessionState,
        deal_id: DealId,
        raw_tasks: Iterable[Mapping[str, Any]],
        now: Optional[datetime] = None,
    ) -> List[TaskView]:
        views = build_task_views(raw_tasks, now)
        session.tasks = views
        self.presenter.render_tasks(deal_id, views)
        return views
