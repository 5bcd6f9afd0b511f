"""Tests for the NewsData.io search adapter (httpx.MockTransport)."""

from __future__ import annotations

import httpx
import pytest

from news_aggregator.infrastructure.sources.newsdata import (
    MAX_PAGE_SIZE,
    NO_RESULTS_MESSAGE,
    NewsDataClient,
    SearchQuery,
    is_placeholder_api_key,
)
from news_aggregator.shared.exceptions import (
    AuthError,
    ConfigurationError,
    ErrorKind,
    InvalidDateError,
    NetworkError,
    RateLimitError,
    ServerError,
    UpstreamPayloadError,
    ValidationError,
)


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class RecordingHandler:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, response: httpx.Response | Exception):
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def make_client(handler, api_key: str | None = "pub_test_key") -> NewsDataClient:
    return NewsDataClient(api_key=api_key, client=mock_client(handler))


class TestPlaceholderKeys:
    @pytest.mark.parametrize(
        "key",
        [None, "", "   ", "your_newsdata_api_key_here", "YOUR_API_KEY_HERE", "<api-key>", "changeme"],
    )
    def test_placeholders(self, key):
        assert is_placeholder_api_key(key)

    def test_real_key(self):
        assert not is_placeholder_api_key("pub_4815162342abcdef")


class TestSearchQuery:
    def test_page_size_clamped(self):
        assert SearchQuery(size=500).page_size == MAX_PAGE_SIZE
        assert SearchQuery(size=0).page_size == 1
        assert SearchQuery(size=10).page_size == 10

    def test_validate_rejects_bad_dates(self):
        with pytest.raises(InvalidDateError):
            SearchQuery(from_date="15/06/2024").validate()
        with pytest.raises(InvalidDateError):
            SearchQuery(to_date="2024-02-30").validate()

    def test_validate_rejects_inverted_range(self):
        with pytest.raises(ValidationError):
            SearchQuery(from_date="2024-06-15", to_date="2024-06-01").validate()


class TestPreflight:
    async def test_missing_key_raises_before_network(self):
        handler = RecordingHandler(httpx.Response(200, json={}))
        client = make_client(handler, api_key=None)
        with pytest.raises(ConfigurationError) as exc_info:
            await client.search(SearchQuery(q="ai"))
        assert exc_info.value.kind is ErrorKind.CONFIGURATION
        assert handler.requests == []

    async def test_placeholder_key_raises_before_network(self):
        handler = RecordingHandler(httpx.Response(200, json={}))
        client = make_client(handler, api_key="your_newsdata_api_key_here")
        with pytest.raises(ConfigurationError):
            await client.search(SearchQuery())
        assert handler.requests == []

    async def test_malformed_date_raises_before_network(self):
        handler = RecordingHandler(httpx.Response(200, json={}))
        client = make_client(handler)
        with pytest.raises(ValidationError) as exc_info:
            await client.search(SearchQuery(from_date="yesterday"))
        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert handler.requests == []


class TestRequestParams:
    async def test_params(self, newsdata_payload):
        handler = RecordingHandler(httpx.Response(200, json=newsdata_payload))
        client = make_client(handler)
        await client.search(
            SearchQuery(
                q="  zero-day ",
                category="Cybersecurity",
                from_date="2024-06-01",
                to_date="2024-06-15",
                size=20,
                next_page="opaque-token==",
                source="BleepingComputer",
            )
        )
        request = handler.requests[0]
        assert request.url.path.endswith("/latest")
        params = dict(request.url.params)
        assert params == {
            "apikey": "pub_test_key",
            "language": "en",
            "category": "technology",
            "q": "zero-day",
            "from_date": "2024-06-01",
            "to_date": "2024-06-15",
            "page": "opaque-token==",
            "size": "20",
        }

    @pytest.mark.parametrize(
        ("category", "expected"),
        [("HealthcareIT", "health"), ("AI", "technology"), ("DevOps", "technology"), ("Business", "business")],
    )
    async def test_category_mapping(self, newsdata_payload, category, expected):
        handler = RecordingHandler(httpx.Response(200, json=newsdata_payload))
        await make_client(handler).search(SearchQuery(category=category))
        assert handler.requests[0].url.params["category"] == expected

    async def test_first_page_has_no_token(self, newsdata_payload):
        handler = RecordingHandler(httpx.Response(200, json=newsdata_payload))
        await make_client(handler).search(SearchQuery())
        assert "page" not in handler.requests[0].url.params


class TestResponses:
    async def test_success(self, newsdata_payload):
        client = make_client(RecordingHandler(httpx.Response(200, json=newsdata_payload)))
        result = await client.search(SearchQuery(q="ransomware"))
        assert len(result.records) == 1
        assert result.total_results == 42
        assert result.next_page == "1718444400123456789"
        assert result.message is None

    async def test_zero_results_is_not_an_error(self):
        payload = {"status": "success", "totalResults": 0, "results": [], "nextPage": None}
        client = make_client(RecordingHandler(httpx.Response(200, json=payload)))
        result = await client.search(SearchQuery(q="zzzz"))
        assert result.records == []
        assert result.total_results == 0
        assert result.next_page is None
        assert result.message == NO_RESULTS_MESSAGE

    async def test_error_status_under_http_200(self):
        payload = {"status": "error", "results": {"message": "The API key is disabled", "code": "Unauthorized"}}
        client = make_client(RecordingHandler(httpx.Response(200, json=payload)))
        with pytest.raises(UpstreamPayloadError) as exc_info:
            await client.search(SearchQuery())
        assert exc_info.value.kind is ErrorKind.UPSTREAM_PAYLOAD
        assert "disabled" in str(exc_info.value)

    async def test_error_code_under_http_200(self):
        payload = {"status": "success", "code": 422, "results": []}
        client = make_client(RecordingHandler(httpx.Response(200, json=payload)))
        with pytest.raises(UpstreamPayloadError):
            await client.search(SearchQuery())

    async def test_non_json_body(self):
        client = make_client(RecordingHandler(httpx.Response(200, text="<html>maintenance</html>")))
        with pytest.raises(UpstreamPayloadError):
            await client.search(SearchQuery())

    async def test_results_not_a_list(self):
        payload = {"status": "success", "results": "nope"}
        client = make_client(RecordingHandler(httpx.Response(200, json=payload)))
        with pytest.raises(UpstreamPayloadError):
            await client.search(SearchQuery())


class TestHttpErrors:
    async def test_401(self):
        client = make_client(RecordingHandler(httpx.Response(401, json={"status": "error"})))
        with pytest.raises(AuthError) as exc_info:
            await client.search(SearchQuery())
        assert exc_info.value.kind is ErrorKind.AUTH
        assert exc_info.value.context.status_code == 401

    async def test_429_honours_retry_after(self):
        client = make_client(RecordingHandler(httpx.Response(429, headers={"Retry-After": "30"})))
        with pytest.raises(RateLimitError) as exc_info:
            await client.search(SearchQuery())
        assert exc_info.value.context.retry_after == 30.0

    async def test_5xx(self):
        client = make_client(RecordingHandler(httpx.Response(503)))
        with pytest.raises(ServerError) as exc_info:
            await client.search(SearchQuery())
        assert exc_info.value.kind is ErrorKind.SERVER

    async def test_other_4xx(self):
        client = make_client(RecordingHandler(httpx.Response(422, json={"results": {"message": "Bad size"}})))
        with pytest.raises(UpstreamPayloadError) as exc_info:
            await client.search(SearchQuery())
        assert "Bad size" in str(exc_info.value)

    async def test_timeout_becomes_network_error(self):
        client = make_client(RecordingHandler(httpx.ReadTimeout("timed out")))
        with pytest.raises(NetworkError) as exc_info:
            await client.search(SearchQuery())
        assert exc_info.value.kind is ErrorKind.NETWORK
        assert isinstance(exc_info.value.__cause__, httpx.TimeoutException)

    async def test_connection_refused_becomes_network_error(self):
        client = make_client(RecordingHandler(httpx.ConnectError("connection refused")))
        with pytest.raises(NetworkError):
            await client.search(SearchQuery())


class TestRetries:
    async def test_retries_retryable_errors(self, newsdata_payload, monkeypatch):
        responses = [httpx.Response(503), httpx.Response(200, json=newsdata_payload)]
        calls = []

        def handler(request):
            calls.append(request)
            return responses.pop(0)

        async def no_sleep(_delay):
            return None

        monkeypatch.setattr("news_aggregator.infrastructure.sources.base_client.asyncio.sleep", no_sleep)
        client = NewsDataClient(api_key="pub_test_key", max_retries=1, client=mock_client(handler))
        result = await client.search(SearchQuery())
        assert len(calls) == 2
        assert result.total_results == 42

    async def test_auth_errors_are_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(401)

        client = NewsDataClient(api_key="pub_test_key", max_retries=3, client=mock_client(handler))
        with pytest.raises(AuthError):
            await client.search(SearchQuery())
        assert len(calls) == 1
