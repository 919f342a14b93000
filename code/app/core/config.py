import logging
import os

SERIES_TICK_SECONDS = float(os.getenv("SERIES_TICK_SECONDS", "45"))
SERIES_SEED = os.getenv("SERIES_SEED")
ORGANIZATION_TYPE = os.getenv("ORGANIZATION_TYPE") or None

STORE_URL = os.getenv("STORE_URL", "")
STORE_API_KEY = os.getenv("STORE_API_KEY", "")
STORE_TIMEOUT = float(os.getenv("STORE_TIMEOUT", "5"))
STORE_PROFILE_ID = os.getenv("STORE_PROFILE_ID", "local")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def series_seed() -> int | None:
    if SERIES_SEED is None or SERIES_SEED == "":
        return None
    return int(SERIES_SEED)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or LOG_LEVEL), format=LOG_FORMAT)
