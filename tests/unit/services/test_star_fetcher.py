"""Unit tests for cached star count lookups.

Tests StarCountFetcher with mocked HTTP responses to verify:
- Request construction (URL, headers, token handling)
- Fresh cache hits skip the network
- Rate limit, error and transport fallbacks to stale cache
- Cache writes and persistence on success
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from ghstars.config.stars import StarsSettings
from ghstars.services.github.star_fetcher import StarCountFetcher
from tests.helpers.mock_factories import (
    NOW_MS,
    FakeClock,
    InMemoryPersistence,
    make_response,
    make_state,
    repo_json,
)

CLIENT_PATH = "ghstars.services.github.star_fetcher.get_github_client"
WINDOW_MS = 60 * 60 * 1000  # default cacheExpiry of 60 minutes
KEY = "octocat/hello-world"

RATE_LIMITED_HEADERS = {
    "X-RateLimit-Remaining": "0",
    "X-RateLimit-Reset": str(NOW_MS // 1000 + 600),
}


def _mock_client(mock_get_client, *responses: object) -> AsyncMock:
    client = AsyncMock()
    mock_get_client.return_value = client
    client.get.side_effect = list(responses)
    return client


def _fetcher(state, clock: FakeClock | None = None) -> StarCountFetcher:
    return StarCountFetcher(
        state,
        base_url="https://api.github.com",
        user_agent="ghstars-tests",
        clock=clock or FakeClock(),
    )


# ═══════════════════════════════════════════════════════════════════════════
# Request construction
# ═══════════════════════════════════════════════════════════════════════════


class TestRequest:
    """Tests for the GitHub request the fetcher issues."""

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_requests_repo_endpoint_with_pinned_headers(self, mock_get_client, fetcher):
        client = _mock_client(mock_get_client, make_response(json_data=repo_json()))

        await fetcher.get_star_count("octocat", "hello-world")

        client.get.assert_awaited_once()
        url = client.get.call_args.args[0]
        headers = client.get.call_args.kwargs["headers"]
        assert url == "https://api.github.com/repos/octocat/hello-world"
        assert headers["Accept"] == "application/vnd.github.v3+json"
        assert headers["User-Agent"] == "ghstars-tests"
        assert "Authorization" not in headers

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_sends_trimmed_token(self, mock_get_client):
        client = _mock_client(mock_get_client, make_response(json_data=repo_json()))
        state = make_state(settings=StarsSettings(api_token="  ghp_secret  "))

        await _fetcher(state).get_star_count("octocat", "hello-world")

        headers = client.get.call_args.kwargs["headers"]
        assert headers["Authorization"] == "token ghp_secret"

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_blank_token_is_not_sent(self, mock_get_client):
        client = _mock_client(mock_get_client, make_response(json_data=repo_json()))
        state = make_state(settings=StarsSettings(api_token="   "))

        await _fetcher(state).get_star_count("octocat", "hello-world")

        assert "Authorization" not in client.get.call_args.kwargs["headers"]


# ═══════════════════════════════════════════════════════════════════════════
# Cache freshness
# ═══════════════════════════════════════════════════════════════════════════


class TestCacheFreshness:
    """Tests for serving fresh cache entries without network calls."""

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_entry_just_inside_window_skips_network(self, mock_get_client):
        client = _mock_client(mock_get_client)
        state = make_state(entries={KEY: (42, NOW_MS - WINDOW_MS + 1)})

        stars = await _fetcher(state).get_star_count("octocat", "hello-world")

        assert stars == 42
        client.get.assert_not_called()

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_entry_at_window_boundary_is_stale(self, mock_get_client):
        client = _mock_client(mock_get_client, make_response(json_data=repo_json(stars=43)))
        state = make_state(entries={KEY: (42, NOW_MS - WINDOW_MS)})

        stars = await _fetcher(state).get_star_count("octocat", "hello-world")

        assert stars == 43
        client.get.assert_awaited_once()

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_expiry_follows_current_settings(self, mock_get_client):
        client = _mock_client(mock_get_client, make_response(json_data=repo_json(stars=43)))
        state = make_state(entries={KEY: (42, NOW_MS - 2 * 60 * 1000)})
        state.settings = StarsSettings(cache_expiry=1)

        stars = await _fetcher(state).get_star_count("octocat", "hello-world")

        assert stars == 43
        client.get.assert_awaited_once()

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_cache_keys_are_case_sensitive(self, mock_get_client):
        client = _mock_client(mock_get_client, make_response(json_data=repo_json(stars=7)))
        state = make_state(entries={KEY: (42, NOW_MS)})

        stars = await _fetcher(state).get_star_count("Octocat", "Hello-World")

        assert stars == 7
        client.get.assert_awaited_once()
        assert state.cache.get("Octocat/Hello-World").stars == 7
        assert state.cache.get(KEY).stars == 42


# ═══════════════════════════════════════════════════════════════════════════
# Successful fetches
# ═══════════════════════════════════════════════════════════════════════════


class TestSuccess:
    """Tests for well-formed 200 responses."""

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_caches_and_serves_within_window(self, mock_get_client, persistence):
        client = _mock_client(mock_get_client, make_response(json_data=repo_json(stars=50)))
        clock = FakeClock()
        fetcher = _fetcher(make_state(persistence), clock)

        first = await fetcher.get_star_count("octocat", "hello-world")
        clock.advance(WINDOW_MS - 1)
        second = await fetcher.get_star_count("octocat", "hello-world")

        assert first == 50
        assert second == 50
        assert client.get.await_count == 1

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_writes_entry_and_persists(self, mock_get_client, persistence):
        _mock_client(mock_get_client, make_response(json_data=repo_json(stars=50)))
        state = make_state(persistence)

        await _fetcher(state).get_star_count("octocat", "hello-world")

        entry = state.cache.get(KEY)
        assert entry.stars == 50
        assert entry.observed_at == NOW_MS
        assert len(persistence.saves) == 1
        assert persistence.saves[0]["cache"][KEY] == {"stars": 50, "timestamp": NOW_MS}

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_zero_stars_is_a_valid_count(self, mock_get_client):
        _mock_client(mock_get_client, make_response(json_data=repo_json(stars=0)))
        state = make_state()

        assert await _fetcher(state).get_star_count("octocat", "hello-world") == 0
        assert state.cache.get(KEY).stars == 0

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_persistence_failure_is_swallowed(self, mock_get_client):
        _mock_client(mock_get_client, make_response(json_data=repo_json(stars=50)))
        state = make_state(InMemoryPersistence(fail_on_save=True))

        stars = await _fetcher(state).get_star_count("octocat", "hello-world")

        assert stars == 50
        assert state.cache.get(KEY).stars == 50

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_clear_cache_triggers_exactly_one_new_call(self, mock_get_client, persistence):
        client = _mock_client(
            mock_get_client,
            make_response(json_data=repo_json(stars=50)),
            make_response(json_data=repo_json(stars=51)),
        )
        state = make_state(persistence)
        fetcher = _fetcher(state)

        await fetcher.get_star_count("octocat", "hello-world")
        await state.clear_cache()
        after_clear = await fetcher.get_star_count("octocat", "hello-world")
        again = await fetcher.get_star_count("octocat", "hello-world")

        assert after_clear == 51
        assert again == 51
        assert client.get.await_count == 2


# ═══════════════════════════════════════════════════════════════════════════
# Rate limiting
# ═══════════════════════════════════════════════════════════════════════════


class TestRateLimit:
    """Tests for quota exhaustion signaled via X-RateLimit headers."""

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_returns_stale_value_unchanged(self, mock_get_client, persistence):
        _mock_client(
            mock_get_client,
            make_response(status_code=403, headers=RATE_LIMITED_HEADERS),
        )
        observed_at = NOW_MS - 2 * WINDOW_MS
        state = make_state(persistence, entries={KEY: (42, observed_at)})

        stars = await _fetcher(state).get_star_count("octocat", "hello-world")

        assert stars == 42
        assert state.cache.get(KEY).observed_at == observed_at
        assert persistence.saves == []

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_returns_none_without_cache(self, mock_get_client):
        _mock_client(
            mock_get_client,
            make_response(status_code=403, headers=RATE_LIMITED_HEADERS),
        )
        state = make_state()

        assert await _fetcher(state).get_star_count("octocat", "hello-world") is None
        assert KEY not in state.cache

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_exhausted_headers_win_over_200_body(self, mock_get_client):
        _mock_client(
            mock_get_client,
            make_response(json_data=repo_json(stars=99), headers=RATE_LIMITED_HEADERS),
        )
        state = make_state(entries={KEY: (42, NOW_MS - 2 * WINDOW_MS)})

        assert await _fetcher(state).get_star_count("octocat", "hello-world") == 42
        assert state.cache.get(KEY).stars == 42

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_remaining_zero_without_reset_is_not_rate_limited(self, mock_get_client):
        _mock_client(
            mock_get_client,
            make_response(json_data=repo_json(stars=99), headers={"X-RateLimit-Remaining": "0"}),
        )
        state = make_state()

        assert await _fetcher(state).get_star_count("octocat", "hello-world") == 99

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_logs_minutes_until_reset(self, mock_get_client, caplog):
        _mock_client(
            mock_get_client,
            make_response(status_code=403, headers=RATE_LIMITED_HEADERS),
        )

        with caplog.at_level("WARNING"):
            await _fetcher(make_state()).get_star_count("octocat", "hello-world")

        assert "Resets in 10 minutes" in caplog.text


# ═══════════════════════════════════════════════════════════════════════════
# Error statuses and malformed bodies
# ═══════════════════════════════════════════════════════════════════════════


class TestErrorResponses:
    """Tests for 404, other failures and malformed bodies."""

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_404_returns_none_and_creates_no_entry(self, mock_get_client, persistence):
        _mock_client(mock_get_client, make_response(status_code=404, json_data={}))
        state = make_state(persistence)

        assert await _fetcher(state).get_star_count("octocat", "missing") is None
        assert "octocat/missing" not in state.cache
        assert persistence.saves == []

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_404_ignores_stale_entry(self, mock_get_client):
        _mock_client(mock_get_client, make_response(status_code=404, json_data={}))
        state = make_state(entries={KEY: (42, NOW_MS - 2 * WINDOW_MS)})

        assert await _fetcher(state).get_star_count("octocat", "hello-world") is None
        assert state.cache.get(KEY).stars == 42

    @pytest.mark.parametrize("status_code", [401, 403, 500, 502])
    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_other_errors_fall_back_to_stale(self, mock_get_client, status_code):
        _mock_client(mock_get_client, make_response(status_code=status_code, json_data={}))
        state = make_state(entries={KEY: (42, NOW_MS - 2 * WINDOW_MS)})

        assert await _fetcher(state).get_star_count("octocat", "hello-world") == 42

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_other_errors_without_cache_return_none(self, mock_get_client):
        _mock_client(mock_get_client, make_response(status_code=500, json_data={}))

        assert await _fetcher(make_state()).get_star_count("octocat", "hello-world") is None

    @pytest.mark.parametrize(
        "body",
        [
            {"name": "hello-world"},
            {"stargazers_count": "50"},
            {"stargazers_count": None},
            {"stargazers_count": True},
            {"stargazers_count": -1},
            [1, 2, 3],
        ],
    )
    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_malformed_body_returns_none_without_touching_cache(
        self, mock_get_client, body
    ):
        _mock_client(mock_get_client, make_response(json_data=body))
        state = make_state(entries={KEY: (42, NOW_MS - 2 * WINDOW_MS)})

        assert await _fetcher(state).get_star_count("octocat", "hello-world") is None
        assert state.cache.get(KEY).stars == 42

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_non_json_body_returns_none(self, mock_get_client):
        _mock_client(mock_get_client, httpx.Response(status_code=200, text="<html>oops</html>"))

        assert await _fetcher(make_state()).get_star_count("octocat", "hello-world") is None


# ═══════════════════════════════════════════════════════════════════════════
# Transport failures
# ═══════════════════════════════════════════════════════════════════════════


class TestTransportFailures:
    """Tests for network-level exceptions."""

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("Name or service not known"),
            httpx.ReadTimeout("timed out"),
            httpx.RemoteProtocolError("connection reset"),
        ],
    )
    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_falls_back_to_stale(self, mock_get_client, error):
        _mock_client(mock_get_client, error)
        state = make_state(entries={KEY: (42, NOW_MS - 2 * WINDOW_MS)})

        assert await _fetcher(state).get_star_count("octocat", "hello-world") == 42

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_returns_none_without_cache(self, mock_get_client):
        _mock_client(mock_get_client, httpx.ConnectTimeout("timed out"))

        assert await _fetcher(make_state()).get_star_count("octocat", "hello-world") is None

    @pytest.mark.anyio
    async def test_unencodable_name_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("request should not be sent")

        state = make_state()
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with patch(CLIENT_PATH, return_value=client):
                stars = await _fetcher(state).get_star_count("own\x00er", "repo")

        assert stars is None
        assert len(state.cache) == 0

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_invalid_url_falls_back_to_stale(self, mock_get_client):
        _mock_client(mock_get_client, httpx.InvalidURL("Invalid non-printable ASCII character"))
        state = make_state(entries={KEY: (42, NOW_MS - 2 * WINDOW_MS)})

        assert await _fetcher(state).get_star_count("octocat", "hello-world") == 42


# ═══════════════════════════════════════════════════════════════════════════
# Renamed repositories
# ═══════════════════════════════════════════════════════════════════════════


class TestRedirects:
    """Tests for 301 responses from renamed or transferred repositories."""

    @pytest.mark.anyio
    async def test_follows_redirect_and_caches_under_requested_key(self, persistence):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            if request.url.path == "/repos/octocat/hello-world":
                return httpx.Response(
                    301, headers={"Location": "https://api.github.com/repositories/42"}
                )
            return httpx.Response(200, json=repo_json(stars=7, full_name="octocat/renamed"))

        state = make_state(persistence)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with patch(CLIENT_PATH, return_value=client):
                stars = await _fetcher(state).get_star_count("octocat", "hello-world")

        assert stars == 7
        assert seen == ["/repos/octocat/hello-world", "/repositories/42"]
        assert state.cache.get(KEY).stars == 7
        assert "octocat/renamed" not in state.cache

    @patch(CLIENT_PATH)
    @pytest.mark.anyio
    async def test_request_asks_client_to_follow_redirects(self, mock_get_client, fetcher):
        client = _mock_client(mock_get_client, make_response(json_data=repo_json()))

        await fetcher.get_star_count("octocat", "hello-world")

        assert client.get.call_args.kwargs["follow_redirects"] is True
