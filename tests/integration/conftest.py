import os

import pytest
from dotenv import find_dotenv, load_dotenv

ENV_LIVE_URL = "EVENTSOURCE_PARSE_URL"

# Cargar .env antes de decidir qué tests de integración se saltan.
load_dotenv(find_dotenv(usecwd=True))


def _live_url() -> str | None:
    url = os.getenv(ENV_LIVE_URL, "").strip()
    return url or None


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if _live_url():
        return
    skip = pytest.mark.skip(reason=f"Falta {ENV_LIVE_URL} (endpoint text/event-stream) en entorno/.env")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def live_url() -> str:
    """URL del endpoint SSE real contra el que se corren los tests de integración."""
    url = _live_url()
    assert url is not None
    return url
