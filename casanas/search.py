"""Search suggestions gathered from several public search engines."""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote_plus

import requests

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0


@dataclass
class SearchEngine:
    """A search engine and the suggestions it returned."""

    name: str
    icon: str
    search_url: str
    reco_url: str
    data: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "icon": self.icon,
            "search_url": self.search_url,
            "reco_url": self.reco_url,
            "data": list(self.data),
        }


def default_engines() -> list[SearchEngine]:
    """The engines queried for suggestions, in display order."""
    return [
        SearchEngine(
            "bing",
            "https://files.codelife.cc/itab/search/bing.svg",
            "https://www.bing.com/search?q=",
            "https://www.bing.com/osjson.aspx?query=",
        ),
        SearchEngine(
            "google",
            "https://files.codelife.cc/itab/search/google.svg",
            "https://www.google.com/search?q=",
            "https://www.google.com/complete/search?client=gws-wiz&xssi=t&hl=en-US&authuser=0&dpr=1&q=",
        ),
        SearchEngine(
            "baidu",
            "https://files.codelife.cc/itab/search/baidu.svg",
            "https://www.baidu.com/s?wd=",
            "https://www.baidu.com/sugrec?json=1&prod=pc&wd=",
        ),
        SearchEngine(
            "duckduckgo",
            "https://files.codelife.cc/itab/search/duckduckgo.svg",
            "https://duckduckgo.com/?q=",
            "https://duckduckgo.com/ac/?type=list&q=",
        ),
        SearchEngine(
            "startpage",
            "https://www.startpage.com/sp/cdn/favicons/apple-touch-icon-60x60--default.png",
            "https://www.startpage.com/do/search?q=",
            "https://www.startpage.com/suggestions?segment=startpage.udog&lui=english&q=",
        ),
    ]


_MISSING = object()


def _child(value: Any, key: str) -> Any:
    if isinstance(value, list) and key.isdigit():
        index = int(key)
        return value[index] if index < len(value) else _MISSING
    if isinstance(value, dict):
        return value.get(key, _MISSING)
    return _MISSING


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(value, ensure_ascii=False)


def _array(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _each(items: Any, key: str) -> list[Any]:
    found = (_child(item, key) for item in _array(items))
    return [item for item in found if item is not _MISSING]


def parse_suggestions(name: str, text: str) -> list[str]:
    """Suggestions from an engine's raw response; empty when it cannot be understood."""
    if name == "google":
        text = text.replace(")]}'", "", 1)
    try:
        document = json.loads(text)
    except ValueError:
        return []
    if name in ("bing", "duckduckgo"):
        values = _array(_child(document, "1"))
    elif name == "google":
        values = _each(_child(document, "0"), "0")
    elif name == "baidu":
        values = _each(_child(document, "g"), "q")
    elif name == "startpage":
        values = _each(_child(document, "suggestions"), "text")
    else:
        return []
    suggestions = [_as_text(value) for value in values]
    if name == "google":
        suggestions = [s.replace("<b>", " ").replace("</b>", "") for s in suggestions]
    return suggestions


def _fill(engine: SearchEngine, key: str, timeout: float) -> None:
    url = engine.reco_url + quote_plus(key)
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as err:
        log.error("failed to get search suggestions from %s (%s): %s", engine.name, url, err)
        return
    engine.data = parse_suggestions(engine.name, response.text)


def search(key: str, timeout: float = DEFAULT_TIMEOUT) -> list[SearchEngine]:
    """Query every engine at once for suggestions on key; failed engines stay empty."""
    engines = default_engines()
    with ThreadPoolExecutor(max_workers=len(engines)) as pool:
        list(pool.map(lambda engine: _fill(engine, key, timeout), engines))
    return engines


def agent_search(url: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """Fetch a URL on the client's behalf and return the body."""
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as err:
        log.error("failed to get search result from %s: %s", url, err)
        raise
    return response.content