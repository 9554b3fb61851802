# File: deal_scout/transport/relays.py
"""deal_scout.transport.relays: Выбор порядка CORS-прокси и обёртка целевого URL."""

from __future__ import annotations

import random
from typing import List, Optional, Sequence
from urllib.parse import quote

__all__: Sequence[str] = ("DEFAULT_RELAYS", "wrap_url", "relay_order")

DEFAULT_RELAYS: tuple[str, ...] = (
    "https://corsproxy.io/?",
    "https://api.codetabs.com/v1/proxy/?quest=",
    "https://cors-anywhere.herokuapp.com/",
    "https://thingproxy.freeboard.io/fetch/",
)

# same unreserved set as JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def wrap_url(relay: str, target: str) -> str:
    """Строит URL запроса через прокси.

    Шаблон с ``?`` ожидает целевой URL как значение параметра, поэтому тот
    кодируется целиком; остальные шаблоны принимают URL в пути как есть.
    """
    if "?" in relay:
        return f"{relay}{quote(target, safe=_URI_COMPONENT_SAFE)}"
    return f"{relay}{target}"


def relay_order(
    target: str,
    relays: Sequence[str],
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Возвращает обёрнутые URL для всех прокси в равномерно случайном порядке."""
    rng = rng or random
    shuffled = rng.sample(list(relays), len(relays))
    return [wrap_url(relay, target) for relay in shuffled]
