# File: tests/test_engine.py
import asyncio
import json

import pytest

from conftest import FakeFetcher, leads_page, page_number, tasks_payload
from deal_scout.aggregator import LoadReport
from deal_scout.engine import run_session
from deal_scout.errors import HttpError, TransportError
from deal_scout.loader.models import Deal
from deal_scout.report import render_html, render_json


def crm(url, token):
    if "filter[entity_id]=2&" in url:
        return HttpError(500)
    if "/api/v4/tasks" in url:
        return tasks_payload({"text": "Call <back>", "complete_till": 0})
    return leads_page([1, 2], has_next=True) if page_number(url) == 1 else leads_page([3])


@pytest.mark.asyncio()
async def test_session_report_collects_deals_and_tasks(fast_config):
    report = await run_session(fast_config, FakeFetcher(crm), "acme.amocrm.ru", "tok", expand=[1, 2])

    assert report.domain == "acme.amocrm.ru"
    assert [d.id for d in report.deals] == [1, 2, 3]
    assert report.complete
    assert report.message == "Loaded 3 deals" and not report.error
    assert [t.text for t in report.tasks[1]] == ["Call <back>"]
    assert report.failed_task_deals == [2]

    data = json.loads(report.json())
    assert [d["id"] for d in data["deals"]] == [1, 2, 3]
    assert data["deals"][0]["tasks"][0]["status"] == "amber"
    assert data["deals"][1]["tasks_failed"] is True


@pytest.mark.asyncio()
async def test_session_rejects_missing_credential(fast_config):
    with pytest.raises(ValueError):
        await run_session(fast_config, FakeFetcher(crm), "acme.amocrm.ru", " ")


@pytest.mark.asyncio()
async def test_reports_are_written(fast_config, tmp_path):
    report = await run_session(fast_config, FakeFetcher(crm), "acme.amocrm.ru", "tok", expand=[1])

    json_path = render_json(report, tmp_path / "out" / "deals.json")
    saved = json.loads(json_path.read_text(encoding="utf-8"))
    assert saved["complete"] is True
    assert len(saved["deals"]) == 3

    html_path = render_html(report, None, tmp_path / "deals.html")
    html = html_path.read_text(encoding="utf-8")
    assert "Deal 3" in html
    assert 'id="tasks-1"' in html
    assert "Call &lt;back&gt;" in html
    assert "#FFC107" in html


@pytest.mark.asyncio()
async def test_expansion_runs_after_page_failure(fast_config):
    def respond(url, token):
        if "/api/v4/tasks" in url:
            return tasks_payload({"text": "call"})
        return leads_page([1], has_next=True) if page_number(url) == 1 else TransportError("relay down")

    report = await run_session(fast_config, FakeFetcher(respond), "acme.amocrm.ru", "tok", expand=[1])

    assert report.error and not report.complete
    assert [t.text for t in report.tasks[1]] == ["call"]


@pytest.mark.asyncio()
async def test_timed_out_session_stops_its_fetches(fast_config):
    tokens = []
    released = asyncio.Event()

    async def hang():
        try:
            await asyncio.Event().wait()
        finally:
            released.set()

    def respond(url, token):
        if "/api/v4/tasks" in url:
            tokens.append(token)
            return hang()
        return leads_page([1])

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(
            run_session(fast_config, FakeFetcher(respond), "acme.amocrm.ru", "tok", expand=[1]),
            timeout=0.2,
        )

    assert tokens and tokens[0].cancelled
    await asyncio.wait_for(released.wait(), timeout=1.0)


def test_html_tells_empty_tasks_from_failed_fetch(tmp_path):
    deals = [Deal(1, "Empty", 1700000000), Deal(2, "Broken", 1700000000)]
    report = LoadReport(domain="acme.amocrm.ru", deals=deals, tasks={1: []}, failed_task_deals=[2])

    html = render_html(report, None, tmp_path / "deals.html").read_text(encoding="utf-8")
    empty, broken = html.split('id="tasks-2"')
    assert "No tasks" in empty and "Failed to load tasks" not in empty
    assert "Failed to load tasks" in broken and "No tasks" not in broken
