import os
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse, urlunparse

import requests
from openai import OpenAI

ADVISOR_BASE_URL = os.getenv("ADVISOR_BASE_URL", "https://api.openai.com/v1")
ADVISOR_MODEL = os.getenv("ADVISOR_MODEL", "gpt-4o-mini")
ADVISOR_TIMEOUT = float(os.getenv("ADVISOR_TIMEOUT", "25"))
ADVISOR_HEALTH_TIMEOUT = float(os.getenv("ADVISOR_HEALTH_TIMEOUT", "1.0"))
ADVISOR_MAX_RETRIES = max(0, int(os.getenv("ADVISOR_MAX_RETRIES", "0")))
ADVISOR_API_KEY = os.getenv("ADVISOR_API_KEY") or os.getenv("OPENAI_API_KEY")
ADVISOR_MAX_TOKENS = int(os.getenv("ADVISOR_MAX_TOKENS", "600"))
ADVISOR_TEMPERATURE = float(os.getenv("ADVISOR_TEMPERATURE", "0.3"))


def _base_url() -> str:
    parsed = urlparse(ADVISOR_BASE_URL)
    path = parsed.path.rstrip("/")
    if path.endswith("/chat/completions"):
        path = path[: -len("/chat/completions")]
    base = parsed._replace(path=path, params="", query="", fragment="")
    return urlunparse(base)


def _get_client() -> OpenAI:
    return OpenAI(base_url=_base_url(), api_key=ADVISOR_API_KEY, max_retries=ADVISOR_MAX_RETRIES)


def check_advisor_online(timeout: float | None = None) -> bool:
    base = _base_url().rstrip("/")
    health_timeout = timeout if timeout is not None else ADVISOR_HEALTH_TIMEOUT
    headers = {"Authorization": f"Bearer {ADVISOR_API_KEY}"} if ADVISOR_API_KEY else {}
    for path in ("/models", "/health"):
        try:
            resp = requests.get(f"{base}{path}", timeout=health_timeout, headers=headers)
        except requests.RequestException:
            continue
        # Anything short of a 5xx means the endpoint answered.
        if resp.status_code < 500:
            return True
    return False


def query_advisor(
    messages: List[Dict[str, str]],
    max_tokens: Optional[int] = None,
    temperature: Optional[float] = None,
) -> Dict[str, Any]:
    if not ADVISOR_API_KEY:
        raise RuntimeError("Missing ADVISOR_API_KEY. Set the environment variable and restart the app.")
    client = _get_client()
    response = client.chat.completions.create(
        model=ADVISOR_MODEL,
        messages=messages,
        temperature=ADVISOR_TEMPERATURE if temperature is None else float(temperature),
        max_tokens=ADVISOR_MAX_TOKENS if max_tokens is None else int(max_tokens),
        timeout=ADVISOR_TIMEOUT,
    )
    return response.model_dump()


def extract_text(response: Dict[str, Any]) -> str:
    choices = response.get("choices") or []
    if not choices:
        return ""
    choice = choices[0]
    message = choice.get("message") if isinstance(choice, dict) else None
    if isinstance(message, dict):
        content = message.get("content")
        if isinstance(content, str):
            return content.strip()
        return ""
    text = choice.get("text") if isinstance(choice, dict) else None
    return str(text).strip() if text else ""
