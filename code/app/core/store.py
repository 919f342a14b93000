import logging
from typing import Any, Dict, List, Optional, Protocol

import requests

from .config import STORE_API_KEY, STORE_TIMEOUT, STORE_URL

logger = logging.getLogger(__name__)


class SimulationStore(Protocol):
    def save_simulation(self, profile_id: str, record: Dict[str, Any]) -> None: ...

    def save_financial_data(self, profile_id: str, record: Dict[str, Any]) -> None: ...

    def load_financial_data(self, profile_id: str) -> Optional[Dict[str, Any]]: ...


class InMemoryStore:
    def __init__(self):
        self.simulations: Dict[str, List[Dict[str, Any]]] = {}
        self.financial_data: Dict[str, Dict[str, Any]] = {}

    def save_simulation(self, profile_id: str, record: Dict[str, Any]) -> None:
        self.simulations.setdefault(profile_id, []).append(dict(record))

    def save_financial_data(self, profile_id: str, record: Dict[str, Any]) -> None:
        self.financial_data[profile_id] = dict(record)

    def load_financial_data(self, profile_id: str) -> Optional[Dict[str, Any]]:
        record = self.financial_data.get(profile_id)
        return dict(record) if record is not None else None


class HttpStore:
    """REST storage with PostgREST-style table endpoints."""

    def __init__(self, base_url: str = STORE_URL, api_key: str = STORE_API_KEY, timeout: float = STORE_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _url(self, table: str) -> str:
        return f"{self.base_url}/{table}"

    def save_simulation(self, profile_id: str, record: Dict[str, Any]) -> None:
        body = {"user_id": profile_id, **record}
        resp = self.session.post(self._url("simulations"), json=body, headers=self._headers(), timeout=self.timeout)
        resp.raise_for_status()

    def save_financial_data(self, profile_id: str, record: Dict[str, Any]) -> None:
        headers = self._headers()
        headers["Prefer"] = "resolution=merge-duplicates"
        body = {"user_id": profile_id, **record}
        resp = self.session.post(self._url("financial_data"), json=body, headers=headers, timeout=self.timeout)
        resp.raise_for_status()

    def load_financial_data(self, profile_id: str) -> Optional[Dict[str, Any]]:
        resp = self.session.get(
            self._url("financial_data"),
            params={"user_id": f"eq.{profile_id}", "limit": "1"},
            headers=self._headers(),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        rows = resp.json()
        if isinstance(rows, list):
            return rows[0] if rows else None
        return rows or None


def default_store() -> SimulationStore:
    if STORE_URL:
        logger.info("using REST store at %s", STORE_URL)
        return HttpStore()
    return InMemoryStore()
