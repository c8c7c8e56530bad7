"""Tests for the Brave search and Jina Reader services."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.core.brave_search_service import search_web, search_web_safe
from app.core.jina_reader_service import fetch_markdown, fetch_markdown_safe


@pytest.fixture
def mock_settings():
    with patch("app.core.brave_search_service.get_settings") as brave_mock, patch(
        "app.core.jina_reader_service.get_settings"
    ) as reader_mock:
        settings = MagicMock()
        settings.BRAVE_API_KEY = "brave-key"
        settings.JINA_API_KEY = "jina-key"
        settings.SEARCH_RESULT_COUNT = 10
        settings.READER_MAX_CHARS = 10_000
        settings.HTTP_TIMEOUT_SECONDS = 5.0
        brave_mock.return_value = settings
        reader_mock.return_value = settings
        yield settings


def _patched_client(method: str, response: MagicMock):
    patcher = patch("httpx.AsyncClient")
    MockClient = patcher.start()
    client_instance = AsyncMock()
    getattr(client_instance, method).return_value = response
    MockClient.return_value.__aenter__ = AsyncMock(return_value=client_instance)
    MockClient.return_value.__aexit__ = AsyncMock(return_value=None)
    return patcher, client_instance


class TestBraveSearch:
    @pytest.mark.asyncio
    async def test_maps_web_results(self, mock_settings):
        response = MagicMock()
        response.raise_for_status = MagicMock()
        response.json.return_value = {
            "web": {
                "results": [
                    {"url": "https://www.epa.gov/rules", "title": "EPA", "description": "Rules"},
                    {"title": "no url"},
                    {"url": "https://www.tceq.texas.gov/rules", "title": "TCEQ", "description": "State"},
                ]
            }
        }
        patcher, client_instance = _patched_client("get", response)
        try:
            results = await search_web("texas environmental")
        finally:
            patcher.stop()

        assert [r.url for r in results] == [
            "https://www.epa.gov/rules",
            "https://www.tceq.texas.gov/rules",
        ]
        assert results[0].snippet == "Rules"
        kwargs = client_instance.get.call_args.kwargs
        assert kwargs["params"]["safesearch"] == "strict"
        assert kwargs["params"]["count"] == 10
        assert kwargs["headers"]["X-Subscription-Token"] == "brave-key"

    @pytest.mark.asyncio
    async def test_missing_web_section(self, mock_settings):
        response = MagicMock()
        response.raise_for_status = MagicMock()
        response.json.return_value = {}
        patcher, _ = _patched_client("get", response)
        try:
            assert await search_web("q") == []
        finally:
            patcher.stop()

    @pytest.mark.asyncio
    async def test_missing_api_key(self, mock_settings):
        mock_settings.BRAVE_API_KEY = None

        with pytest.raises(ValueError, match="BRAVE_API_KEY not configured"):
            await search_web("q")

    @pytest.mark.asyncio
    async def test_safe_returns_none_on_timeout(self, mock_settings):
        with patch(
            "app.core.brave_search_service.search_web",
            AsyncMock(side_effect=httpx.TimeoutException("slow")),
        ):
            assert await search_web_safe("q") is None


class TestJinaReader:
    @pytest.mark.asyncio
    async def test_fetch_markdown_truncates(self, mock_settings):
        mock_settings.READER_MAX_CHARS = 20
        response = MagicMock()
        response.is_success = True
        response.text = "# Title\n\n" + "x" * 100
        patcher, client_instance = _patched_client("get", response)
        try:
            content = await fetch_markdown("https://www.epa.gov/rules")
        finally:
            patcher.stop()

        assert len(content) == 20
        args, kwargs = client_instance.get.call_args
        assert args[0] == "https://r.jina.ai/https://www.epa.gov/rules"
        assert kwargs["headers"]["Accept"] == "text/markdown"
        assert kwargs["headers"]["Authorization"] == "Bearer jina-key"

    @pytest.mark.asyncio
    async def test_non_success_returns_empty(self, mock_settings):
        response = MagicMock()
        response.is_success = False
        response.status_code = 451
        patcher, _ = _patched_client("get", response)
        try:
            assert await fetch_markdown("https://blocked.example") == ""
        finally:
            patcher.stop()

    @pytest.mark.asyncio
    async def test_safe_returns_empty_on_network_error(self, mock_settings):
        with patch(
            "app.core.jina_reader_service.fetch_markdown",
            AsyncMock(side_effect=httpx.ConnectError("down")),
        ):
            assert await fetch_markdown_safe("https://x.example") == ""

    @pytest.mark.asyncio
    async def test_safe_returns_empty_on_invalid_url(self, mock_settings):
        with patch(
            "app.core.jina_reader_service.fetch_markdown",
            AsyncMock(side_effect=httpx.InvalidURL("Invalid non-printable ASCII character in URL")),
        ):
            assert await fetch_markdown_safe("https://bad.example/\x07") == ""
