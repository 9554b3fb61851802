# File: deal_scout/presenter.py
"""deal_scout.presenter: Канал от ядра загрузки к интерфейсу.

The core never draws anything itself. It pushes render data and messages
into a :class:`Presenter`; a UI (or the CLI) subclasses it.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Sequence, Set, Tuple

import click

from deal_scout.loader.models import Deal, DealId, TaskView
from deal_scout.logger import logger

__all__ = ["Severity", "Presenter", "RecordingPresenter"]


class Severity(str, Enum):
    INFO = "info"
    ERROR = "error"


class Presenter:
    """No-op base; every hook may be overridden independently."""

    def render_deals(self, deals: Sequence[Deal], expanded_id: Optional[DealId]) -> None:
        pass

    def show_tasks_loading(self, deal_id: DealId) -> None:
        pass

    def render_tasks(self, deal_id: DealId, tasks: Sequence[TaskView]) -> None:
        pass

    def show_task_retry(self, deal_id: DealId) -> None:
        pass

    def show_message(self, text: str, severity: Severity = Severity.INFO) -> None:
        pass

    def clear_message(self) -> None:
        pass

    def set_loading(self, loading: bool) -> None:
        pass


class RecordingPresenter(Presenter):
    """Keeps the latest state of every channel; optionally echoes it with click."""

    def __init__(self, echo: bool = False) -> None:
        self.echo = echo
        self.deals: List[Deal] = []
        self.expanded_id: Optional[DealId] = None
        self.tasks: Dict[DealId, List[TaskView]] = {}
        self.retry_deals: Set[DealId] = set()
        self.message: Optional[Tuple[str, Severity]] = None
        self.messages: List[Tuple[str, Severity]] = []
        self.loading = False
        self.render_count = 0

    def render_deals(self, deals: Sequence[Deal], expanded_id: Optional[DealId]) -> None:
        self.deals = list(deals)
        self.expanded_id = expanded_id
        self.render_count += 1
        if self.echo and deals:
            click.echo(f"{len(deals)} deals loaded so far", err=True)

    def show_tasks_loading(self, deal_id: DealId) -> None:
        self.retry_deals.discard(deal_id)

    def render_tasks(self, deal_id: DealId, tasks: Sequence[TaskView]) -> None:
        self.tasks[deal_id] = list(tasks)
        self.retry_deals.discard(deal_id)
        if self.echo:
            click.echo(f"Deal {deal_id}: {len(tasks)} tasks" if tasks else f"Deal {deal_id}: no tasks", err=True)

    def show_task_retry(self, deal_id: DealId) -> None:
        self.retry_deals.add(deal_id)
        if self.echo:
            click.secho(f"Deal {deal_id}: failed to load tasks", fg="red", err=True)

    def show_message(self, text: str, severity: Severity = Severity.INFO) -> None:
        self.message = (text, severity)
        self.messages.append((text, severity))
        logger.info("Message [%s]: %s", severity.value, text)
        if self.echo:
            if severity is Severity.ERROR:
                click.secho(text, fg="red", err=True)
            else:
                click.secho(text, fg="green", err=True)

    def clear_message(self) -> None:
        self.message = None

    def set_loading(self, loading: bool) -> None:
        self.loading = loading
