"""Tests for the Storyblok Content Delivery API client."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from storysync.config.models import StoryblokSettings
from storysync.content import StoryblokClient
from storysync.errors import UpstreamFetchError


def _client(handler, **overrides) -> StoryblokClient:
    values = {"access_token": "tok", "per_page": 25}
    values.update(overrides)
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return StoryblokClient(StoryblokSettings(**values), client=http_client)


def test_fetch_page_sends_listing_parameters_and_reads_total_header() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            headers={"total": "60"},
            json={"stories": [{"id": 1, "name": "One", "full_slug": "one"}]},
        )

    page = asyncio.run(_client(handler).fetch_page(2))

    assert page.total == 60
    assert page.per_page == 25
    assert page.page == 2
    assert [item.id for item in page.items] == [1]
    request = requests[0]
    assert request.url.path == "/v2/cdn/stories"
    params = request.url.params
    assert params["token"] == "tok"
    assert params["page"] == "2"
    assert params["per_page"] == "25"
    assert params["version"] == "published"
    assert params["starts_with"] == ""
    assert params["filter_query[component][in]"] == "article,page"


def test_component_filter_is_omitted_when_not_configured() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, headers={"total": "0"}, json={"stories": []})

    asyncio.run(_client(handler, components=[]).fetch_page(1))

    assert "filter_query[component][in]" not in requests[0].url.params


def test_missing_total_header_falls_back_to_page_size() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"stories": [{"id": 1}, {"id": 2}]})

    page = asyncio.run(_client(handler).fetch_page(1))

    assert page.total == 2


def test_fetch_by_id_returns_story() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={"story": {"id": 42, "name": "Answer", "content": {"component": "page"}}},
        )

    story = asyncio.run(_client(handler).fetch_by_id("42"))

    assert story is not None
    assert story.id == 42
    assert story.component == "page"
    assert requests[0].url.path == "/v2/cdn/stories/42"
    assert requests[0].url.params["token"] == "tok"


def test_fetch_by_id_without_story_returns_none() -> None:
    story = asyncio.run(_client(lambda request: httpx.Response(200, json={})).fetch_by_id(1))

    assert story is None


@pytest.mark.parametrize("status", [401, 404, 500])
def test_error_status_raises_upstream_fetch_error(status: int) -> None:
    client = _client(lambda request: httpx.Response(status, json={"error": "nope"}))

    with pytest.raises(UpstreamFetchError) as excinfo:
        asyncio.run(client.fetch_page(1))

    assert excinfo.value.status_code == status


def test_listing_without_stories_array_is_rejected() -> None:
    client = _client(lambda request: httpx.Response(200, json={"story": {}}))

    with pytest.raises(UpstreamFetchError):
        asyncio.run(client.fetch_page(1))


def test_transport_error_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamFetchError):
        asyncio.run(_client(handler).fetch_by_id(1))
