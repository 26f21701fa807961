"""Tactical tips — optional flavor text from a local Ollama model.

The tips shown on the start screen come from an LLM when one is
reachable and from a static per-language message otherwise.  Nothing in
this module touches simulation state: a slow or failing model only means
the fallback text stays on screen.

``fetch_async`` runs the request on a daemon thread and hands the result
to a callback, so callers on the frame loop never wait on the network.
"""

from __future__ import annotations

import threading
from typing import Callable

import requests
from loguru import logger

SUPPORTED_LANGUAGES = ("en", "zh")

FALLBACK_TIPS: dict[str, str] = {
    "en": "Click to intercept rockets. Predict their path!",
    "zh": "点击屏幕拦截敌方火箭。预判它们的路径！",
}

_PROMPTS: dict[str, str] = {
    "en": (
        "Provide three short tactical tips for players of 'Nova Defense', "
        "a Missile Command style game."
    ),
    "zh": "给玩塔防游戏《新星防御》的玩家提供三条简短的战术建议。导弹指令风格。",
}


def normalize_language(language: str | None) -> str:
    """Map any language tag onto a supported one, defaulting to English."""
    if not language:
        return "en"
    lang = language.lower().split("-")[0]
    return lang if lang in SUPPORTED_LANGUAGES else "en"


class TipsService:
    """Fetches tips from Ollama with a static fallback per language."""

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "gemma3:4b",
        timeout: float = 10.0,
        enabled: bool = True,
    ) -> None:
        self._host = host.rstrip("/")
        self.model = model
        self._timeout = timeout
        self.enabled = enabled
        self._cache: dict[str, str] = {}
        self._pending: set[str] = set()
        self._lock = threading.Lock()

    def get_cached(self, language: str | None) -> str:
        """Last fetched tips for *language*, or the fallback text."""
        lang = normalize_language(language)
        with self._lock:
            return self._cache.get(lang, FALLBACK_TIPS[lang])

    def fetch(self, language: str | None) -> str:
        """Query the model synchronously.  Never raises."""
        lang = normalize_language(language)
        if not self.enabled:
            return FALLBACK_TIPS[lang]
        try:
            text = self._call_ollama(_PROMPTS[lang])
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Tips fetch failed ({lang}): {e}")
            return FALLBACK_TIPS[lang]

        text = text.strip()
        if not text:
            logger.warning(f"Tips fetch returned no text ({lang})")
            return FALLBACK_TIPS[lang]
        with self._lock:
            self._cache[lang] = text
        return text

    def fetch_async(
        self,
        language: str | None,
        callback: Callable[[str], None] | None = None,
    ) -> threading.Thread:
        """Fetch on a daemon thread; *callback* receives the tips text."""
        lang = normalize_language(language)

        def _run() -> None:
            try:
                text = self.fetch(lang)
            finally:
                with self._lock:
                    self._pending.discard(lang)
            if callback is not None:
                callback(text)

        thread = threading.Thread(target=_run, name="tips-fetch", daemon=True)
        thread.start()
        return thread

    def refresh(self, language: str | None) -> threading.Thread | None:
        """Start a background fetch unless *language* is cached or already in flight."""
        lang = normalize_language(language)
        if not self.enabled:
            return None
        with self._lock:
            if lang in self._cache or lang in self._pending:
                return None
            self._pending.add(lang)
        logger.debug(f"Tips: fetching {lang}")
        return self.fetch_async(lang)

    def _call_ollama(self, prompt: str) -> str:
        """Call the Ollama chat API and return the response text."""
        resp = requests.post(
            f"{self._host}/api/chat",
            json={
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
                "stream": False,
                "options": {"temperature": 0.8, "num_predict": 256},
            },
            timeout=self._timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("unexpected response shape")
        message = data.get("message")
        if not isinstance(message, dict):
            raise ValueError("response has no message object")
        content = message.get("content", "")
        if not isinstance(content, str):
            raise ValueError("message content is not text")
        return content
