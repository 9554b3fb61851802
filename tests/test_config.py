# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from deal_scout.config import LoaderConfig, load_config
from deal_scout.transport.relays import DEFAULT_RELAYS


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,expect_exc",
    [
        ("page_size: 50\nrequest_delay: 0.5", None),
        (json.dumps({"page_size": 50, "relays": ["https://relay.test/?url="]}), None),
        ('{"page_size": 0}', ValidationError),
        ('{"relays": []}', ValidationError),
        ('{"relays": ["ftp://relay.test/"]}', ValidationError),
        ('{"unknown_key": 1}', ValidationError),
        ("not: a: mapping", ValueError),
        ("::invalid yaml", TypeError),
    ],
)
def test_load_config_variants(tmp_path, content, expect_exc):
    suffix = ".yaml" if not content.strip().startswith("{") else ".json"
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, LoaderConfig)
        assert cfg.page_size == 50


def test_defaults_match_reference_timings():
    cfg = LoaderConfig()
    assert cfg.relays == list(DEFAULT_RELAYS)
    assert (cfg.page_size, cfg.request_timeout, cfg.task_timeout) == (2, 15.0, 20.0)
    assert (cfg.page_attempts, cfg.max_retries) == (3, 5)
    assert (cfg.request_delay, cfg.retry_backoff, cfg.queue_backoff) == (1.0, 1.0, 2.0)


def test_load_config_default_missing_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config(None) == LoaderConfig()


def test_load_config_reads_default_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("max_retries: 2\n", encoding="utf-8")
    assert load_config(None).max_retries == 2


def test_explicit_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_unsupported_suffix(tmp_path):
    with pytest.raises(ValueError):
        load_config(write_file(tmp_path, "page_size = 3", ".toml"))


def test_config_is_frozen():
    with pytest.raises(ValidationError):
        LoaderConfig().page_size = 10
