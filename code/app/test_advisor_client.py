import pytest
import requests

from app.ai import advisor_client
from app.ai.advisor_client import extract_text, query_advisor


def test_extract_text_from_chat_message():
    response = {"choices": [{"message": {"role": "assistant", "content": "  Keep costs flat.  "}}]}
    assert extract_text(response) == "Keep costs flat."


def test_extract_text_from_completion_text():
    assert extract_text({"choices": [{"text": "ok"}]}) == "ok"


def test_extract_text_empty():
    assert extract_text({"choices": []}) == ""
    assert extract_text({"choices": [{"message": {"content": None}}]}) == ""


def test_query_requires_api_key(monkeypatch):
    monkeypatch.setattr(advisor_client, "ADVISOR_API_KEY", None)
    with pytest.raises(RuntimeError):
        query_advisor([{"role": "user", "content": "hi"}])


def test_base_url_strips_completions_path(monkeypatch):
    monkeypatch.setattr(advisor_client, "ADVISOR_BASE_URL", "https://llm.example.com/v1/chat/completions/")
    assert advisor_client._base_url() == "https://llm.example.com/v1"


class StatusResponse:
    def __init__(self, status_code):
        self.status_code = status_code


def test_check_online_accepts_non_5xx(monkeypatch):
    seen = []

    def fake_get(url, timeout, headers):
        seen.append(url)
        return StatusResponse(401)

    monkeypatch.setattr(advisor_client, "ADVISOR_BASE_URL", "https://llm.example.com/v1")
    monkeypatch.setattr(advisor_client.requests, "get", fake_get)
    assert advisor_client.check_advisor_online(timeout=0.5) is True
    assert seen == ["https://llm.example.com/v1/models"]


def test_check_online_false_when_unreachable(monkeypatch):
    def fake_get(url, timeout, headers):
        if url.endswith("/models"):
            raise requests.ConnectionError("refused")
        return StatusResponse(502)

    monkeypatch.setattr(advisor_client.requests, "get", fake_get)
    assert advisor_client.check_advisor_online() is False
