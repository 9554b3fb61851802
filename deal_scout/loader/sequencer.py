# === FILE: deal_scout/loader/sequencer.py ===
from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol

from deal_scout.config import LoaderConfig
from deal_scout.errors import Cancelled, DealScoutError, JobAbandoned
from deal_scout.loader.jobs import DealsPage, Job, TasksForDeal
from deal_scout.loader.materializer import Materializer, embedded_items, has_next_page
from deal_scout.loader.models import Credential, DealId
from deal_scout.loader.session import SessionState, normalize_domain
from deal_scout.logger import logger
from deal_scout.presenter import Presenter, Severity
from deal_scout.transport.cancel import CancelToken
from deal_scout.transport.retry import fetch_with_retry

__all__ = ("Fetcher", "Sequencer")


class Fetcher(Protocol):
    async def fetch(
        self,
        url: str,
        credential: str,
        token: Optional[CancelToken] = None,
        timeout: Optional[float] = None,
    ) -> Any: ...


class Sequencer:
    """Однопоточная очередь запросов: по одному заданию за раз, с ретраями на месте."""

    def __init__(self, config: LoaderConfig, fetcher: Fetcher, presenter: Presenter) -> None:
        self.config = config
        self.fetcher = fetcher
        self.presenter = presenter
        self.session = SessionState(max_retries=config.max_retries)
        self.materializer = Materializer(presenter, self.enqueue)
        self._drain_task: Optional[asyncio.Task[None]] = None
        self._idle = asyncio.Event()
        self._idle.set()

    # ------------------------------------------------------------------ #
    # Commands from the UI                                               #
    # ------------------------------------------------------------------ #

    def begin_load(self, domain: str, credential: str) -> bool:
        """Reset the session and queue the first deals page.

        Returns False (after showing an error) when an input is empty.
        """
        self.reset()
        domain = normalize_domain(domain)
        credential = credential.strip()
        if not domain or not credential:
            self.presenter.show_message("Please fill in both domain and API key", Severity.ERROR)
            return False

        self.session.credential = Credential(domain, credential)
        logger.info("Loading deals from %s", domain)
        self.presenter.set_loading(True)
        self.enqueue(DealsPage(domain, credential, page=self.session.next_page))
        return True

    def expand_deal(self, deal_id: DealId) -> None:
        self.session.expanded_deal_id = deal_id
        self._enqueue_tasks(deal_id)

    def collapse_deal(self) -> None:
        self.session.expanded_deal_id = None

    def retry_task_fetch(self, deal_id: DealId) -> None:
        self.session.expanded_deal_id = deal_id
        self._enqueue_tasks(deal_id)
        self._start_drain()

    def reset(self) -> None:
        """Drop the current session: cancel its fetches and discard its queue."""
        self.close("session reset")
        self.session = SessionState(max_retries=self.config.max_retries)
        self.presenter.render_deals([], None)
        self.presenter.clear_message()

    def close(self, reason: str = "sequencer closed") -> None:
        """Stop the drain task and the in-flight task fetch; keep deals and presenter state."""
        self.session.cancel_task_fetch(reason)
        self.session.queue.clear()
        if self._drain_task is not None and not self._drain_task.done():
            self._drain_task.cancel()
        self._drain_task = None
        self._idle.set()

    # ------------------------------------------------------------------ #
    # Queue                                                              #
    # ------------------------------------------------------------------ #

    def enqueue(self, job: Job) -> None:
        self.session.queue.append(job)
        logger.debug("Queued %s (%d pending)", job.describe(), len(self.session.queue))
        if not self.session.draining and not self.session.busy:
            self._start_drain()

    async def wait_idle(self) -> None:
        """Wait until the current drain finishes; re-raise an unexpected crash of it."""
        await self._idle.wait()
        task = self._drain_task
        if task is not None and task.done() and not task.cancelled():
            exc = task.exception()
            if exc is not None:
                raise exc

    def _start_drain(self) -> None:
        if self._drain_task is not None and not self._drain_task.done():
            return
        self._idle.clear()
        self._drain_task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        try:
            await self.process_queue()
        finally:
            if self._drain_task is asyncio.current_task():
                self._idle.set()

    async def process_queue(self) -> None:
        """Drain the queue head-first until it is empty.

        Once page loading has stopped, queued deals pages are dropped but
        task jobs still run. No-op when a drain is already running or a job
        is in progress.
        """
        session = self.session
        if session.draining or session.busy or not session.queue:
            return

        session.draining = True
        try:
            while session.queue:
                job = session.queue[0]
                if session.stopped and isinstance(job, DealsPage):
                    session.queue.popleft()
                    continue
                session.busy = True
                try:
                    await self._dispatch(session, job)
                except DealScoutError as exc:
                    await self._on_failure(session, job, exc)
                    continue
                finally:
                    session.busy = False

                session.queue.popleft()
                session.retry_count = 0
                await asyncio.sleep(self.config.request_delay)
        finally:
            session.draining = False

        if not session.queue:
            self.presenter.set_loading(False)

    async def _on_failure(self, session: SessionState, job: Job, exc: DealScoutError) -> None:
        session.retry_count += 1
        logger.warning(
            "Job %s failed (%d/%d): %s", job.describe(), session.retry_count, session.max_retries, exc
        )
        if session.retry_count < session.max_retries:
            await asyncio.sleep(session.retry_count * self.config.queue_backoff)
            return

        session.queue.popleft()
        abandoned = JobAbandoned(job, session.retry_count, exc)
        session.retry_count = 0
        logger.error("Giving up on %s: %s", job.describe(), abandoned)

        if isinstance(job, TasksForDeal):
            if session.has_deal(job.deal_id):
                self.presenter.show_task_retry(job.deal_id)
            return

        # page loading ends here; task panels keep working
        session.stopped = True
        if not isinstance(exc, Cancelled):
            self.presenter.show_message(f"Error: {abandoned}", Severity.ERROR)

    # ------------------------------------------------------------------ #
    # Jobs                                                               #
    # ------------------------------------------------------------------ #

    async def _dispatch(self, session: SessionState, job: Job) -> None:
        if isinstance(job, DealsPage):
            await self._load_deals_page(session, job)
        elif isinstance(job, TasksForDeal):
            await self._load_tasks(session, job)
        else:
            raise TypeError(f"Unknown job type: {type(job).__name__}")

    async def _load_deals_page(self, session: SessionState, job: DealsPage) -> None:
        url = job.url(self.config.page_size)
        payload = await fetch_with_retry(
            lambda: self.fetcher.fetch(url, job.credential, timeout=self.config.request_timeout),
            job.describe(),
            attempts=self.config.page_attempts,
            backoff=self.config.retry_backoff,
        )
        leads = embedded_items(payload, "leads")
        if not leads:
            self._all_loaded(session)
            return

        self.materializer.ingest_deals_page(session, leads)
        session.next_page += 1
        if has_next_page(payload):
            self.enqueue(DealsPage(job.domain, job.credential, page=session.next_page))
        else:
            self._all_loaded(session)

    async def _load_tasks(self, session: SessionState, job: TasksForDeal) -> None:
        if not session.has_deal(job.deal_id):
            logger.debug("Deal %s is not listed, skipping its tasks", job.deal_id)
            return

        self.presenter.show_tasks_loading(job.deal_id)
        session.cancel_task_fetch()
        token = CancelToken()
        token.cancel_after(self.config.task_timeout)
        session.task_token = token
        try:
            payload = await self.fetcher.fetch(
                job.url(), job.credential, token=token, timeout=self.config.request_timeout
            )
        except DealScoutError:
            if session.expanded_deal_id != job.deal_id:
                logger.debug("Dropping failed task fetch for collapsed deal %s", job.deal_id)
                return
            raise
        finally:
            token.release()
            if session.task_token is token:
                session.task_token = None

        if session.expanded_deal_id != job.deal_id:
            logger.debug("Discarding stale tasks of deal %s", job.deal_id)
            return
        self.materializer.ingest_tasks(session, job.deal_id, embedded_items(payload, "tasks"))

    def _all_loaded(self, session: SessionState) -> None:
        if session.last_page:
            return
        session.last_page = True
        logger.info("All deals loaded: %d", len(session.deals))
        self.presenter.show_message(f"Loaded {len(session.deals)} deals", Severity.INFO)

    def _enqueue_tasks(self, deal_id: DealId) -> None:
        credential = self.session.credential
        if credential is None:
            logger.debug("No active session, ignoring deal %s", deal_id)
            return
        self.enqueue(TasksForDeal(credential.domain, credential.token, deal_id))
