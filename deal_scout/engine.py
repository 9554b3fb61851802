# File: deal_scout/engine.py
"""deal_scout.engine: Запуск полной сессии загрузки для CLI и тестов."""

from __future__ import annotations

from typing import Iterable, Optional

from aiohttp import ClientSession

from deal_scout.aggregator import LoadReport, build_report
from deal_scout.config import LoaderConfig
from deal_scout.loader.models import DealId
from deal_scout.loader.sequencer import Fetcher, Sequencer
from deal_scout.logger import logger
from deal_scout.presenter import RecordingPresenter
from deal_scout.transport.fetcher import RelayFetcher

__all__ = ["start_load", "run_session"]


async def run_session(
    config: LoaderConfig,
    fetcher: Fetcher,
    domain: str,
    credential: str,
    expand: Iterable[DealId] = (),
    presenter: Optional[RecordingPresenter] = None,
) -> LoadReport:
    """Load every deals page, then open each deal of *expand* in turn.

    Raises ValueError when the domain or credential is empty.
    """
    presenter = presenter or RecordingPresenter()
    sequencer = Sequencer(config, fetcher, presenter)
    if not sequencer.begin_load(domain, credential):
        raise ValueError(presenter.message[0] if presenter.message else "invalid input")
    try:
        await sequencer.wait_idle()
        for deal_id in expand:
            sequencer.expand_deal(deal_id)
            await sequencer.wait_idle()
        sequencer.collapse_deal()
    finally:
        # the drain must not outlive the HTTP session, e.g. under wait_for
        sequencer.close()

    report = build_report(sequencer.session, presenter)
    logger.info("Session finished: %d deals, %d task lists", len(report.deals), len(report.tasks))
    return report


async def start_load(
    config: LoaderConfig,
    domain: str,
    credential: str,
    expand: Iterable[DealId] = (),
    echo: bool = False,
) -> LoadReport:
    """Запускает загрузку через пул прокси и возвращает отчёт."""
    logger.info("Starting load…")
    async with ClientSession() as http:
        fetcher = RelayFetcher(http, config.relays, timeout=config.request_timeout)
        return await run_session(
            config, fetcher, domain, credential, expand, presenter=RecordingPresenter(echo=echo)
        )
