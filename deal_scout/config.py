# === FILE: deal_scout/config.py ===
"""
Модуль для загрузки и валидации конфигурации загрузчика DealScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from deal_scout.transport.relays import DEFAULT_RELAYS


class LoaderConfig(BaseModel):
    """Параметры очереди запросов, ретраев и пула прокси."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    relays: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RELAYS),
        min_length=1,
        description="Шаблоны CORS-прокси. С '?' URL кодируется, иначе дописывается как есть.",
    )
    page_size: int = Field(2, ge=1, le=250, description="Сделок на одну страницу (limit).")
    request_timeout: float = Field(15.0, gt=0, description="Таймаут одной попытки через прокси (секунд).")
    task_timeout: float = Field(20.0, gt=0, description="Общий таймаут загрузки задач сделки (секунд).")
    request_delay: float = Field(1.0, ge=0, description="Пауза между успешными запросами (секунд).")
    page_attempts: int = Field(3, ge=1, description="Попыток на загрузку одной страницы сделок.")
    retry_backoff: float = Field(1.0, ge=0, description="Шаг линейной задержки между попытками (секунд).")
    max_retries: int = Field(5, ge=1, description="Неудач подряд, после которых задание снимается с очереди.")
    queue_backoff: float = Field(2.0, ge=0, description="Шаг задержки перед повтором задания очереди (секунд).")

    @field_validator("relays")
    def _check_relay_scheme(cls, v: list[str]) -> list[str]:
        cleaned = [r.strip() for r in v]
        for relay in cleaned:
            if not relay.startswith(("http://", "https://")):
                raise ValueError(f"relay must be an http(s) URL template: {relay!r}")
        return cleaned


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> LoaderConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект LoaderConfig.
    Без пути берёт configs/default.yaml, а если его нет, значения по умолчанию.
    Явно указанный, но отсутствующий файл даёт FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return LoaderConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return LoaderConfig(**data)


__all__ = ["LoaderConfig", "load_config", "ValidationError"]
