"""
Mutable state of one load session, from ``begin_load`` until the next one.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Set

from deal_scout.loader.jobs import Job
from deal_scout.loader.models import Credential, Deal, DealId, TaskView
from deal_scout.transport.cancel import CancelToken


@dataclass
class SessionState:
    """Accumulated deals, pagination cursor and queue bookkeeping.

    Only the sequencer and the materializer mutate it, and only from the
    single drain task, so no locking is needed.
    """

    max_retries: int = 5
    credential: Optional[Credential] = None
    deals: List[Deal] = field(default_factory=list)
    seen_ids: Set[DealId] = field(default_factory=set)
    next_page: int = 1
    last_page: bool = False
    # set when a deals page is abandoned; no further pages are fetched
    stopped: bool = False
    expanded_deal_id: Optional[DealId] = None
    task_token: Optional[CancelToken] = None
    tasks: List[TaskView] = field(default_factory=list)
    queue: Deque[Job] = field(default_factory=deque)
    draining: bool = False
    busy: bool = False
    retry_count: int = 0

    def has_deal(self, deal_id: DealId) -> bool:
        return deal_id in self.seen_ids

    def cancel_task_fetch(self, reason: str = "superseded") -> None:
        if self.task_token is not None:
            self.task_token.cancel(reason)
            self.task_token = None


def normalize_domain(domain: str) -> str:
    """``https://acme.amocrm.ru/`` -> ``acme.amocrm.ru``."""
    domain = domain.strip()
    for prefix in ("https://", "http://"):
        if domain.lower().startswith(prefix):
            domain = domain[len(prefix):]
    return domain.rstrip("/")
