from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

import httpx
import pytest

from rbxsync.adapters.roblox import RobloxResourceService
from rbxsync.config import RateLimit, ResilienceConfig, RobloxConfig
from rbxsync.domain.errors import (
    RateLimitedError,
    RemoteError,
    RemoteValidationError,
    TransientError,
    UnauthorizedError,
)
from rbxsync.domain.model import ResourceType
from tests.helpers.http import make_client_factory, multipart_value

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from rbxsync.adapters.http_resilience import ResilientClient
    from tests.helpers.http import Handler

    type ServiceFactory = Callable[[Handler], RobloxResourceService]

APIS = "https://apis.example.test"
BADGES = "https://badges.example.test"
UNIVERSE = 4242
PASSES_URL = f"{APIS}/game-passes/v1/universes/{UNIVERSE}/game-passes"
PRODUCTS_URL = f"{APIS}/developer-products/v2/universes/{UNIVERSE}/developer-products"


def _config(ratelimit: RateLimit | None = None) -> RobloxConfig:
    return RobloxConfig(
        api_key="test-key",
        apis_base_url=APIS,
        badges_base_url=BADGES,
        resilience=ResilienceConfig(name="roblox-test", ratelimit=ratelimit),
    )


@pytest.fixture
def make_service() -> Iterator[ServiceFactory]:
    services: list[RobloxResourceService] = []

    def build(handler: Handler) -> RobloxResourceService:
        service = RobloxResourceService(
            config=_config(), universe_id=UNIVERSE, client_factory=make_client_factory(handler)
        )
        services.append(service)
        return service

    yield build
    for service in services:
        service.close()


def test_list_passes_follows_page_tokens(make_service: ServiceFactory) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if "pageToken" not in request.url.params:
            return httpx.Response(
                200,
                json={
                    "gamePasses": [
                        {
                            "gamePassId": 1,
                            "name": "VIP",
                            "description": "",
                            "isForSale": True,
                            "iconAssetId": 501,
                            "priceInformation": {
                                "defaultPriceInRobux": 499,
                                "enabledFeatures": ["RegionalPricing"],
                            },
                        }
                    ],
                    "nextPageToken": "next",
                },
            )
        return httpx.Response(
            200, json={"gamePasses": [{"gamePassId": 2, "name": "Gold"}], "nextPageToken": None}
        )

    states = make_service(handler).list_resources(ResourceType.PASS)

    assert [state.id for state in states] == [1, 2]
    assert states[0].fields == {
        "name": "VIP",
        "description": "",
        "price": 499,
        "for_sale": True,
        "regional_pricing": True,
    }
    assert states[0].icon_asset_id == 501
    assert states[1].fields == {"name": "Gold"}
    assert str(seen[0].url).startswith(f"{PASSES_URL}/creator")
    assert seen[1].url.params["pageToken"] == "next"
    assert all(request.headers["x-api-key"] == "test-key" for request in seen)


def test_list_badges_uses_cursor_pagination(make_service: ServiceFactory) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url).startswith(f"{BADGES}/v1/universes/{UNIVERSE}/badges")
        if request.url.params.get("cursor") == "c2":
            return httpx.Response(200, json={"data": [{"id": 8, "name": "Two"}]})
        return httpx.Response(
            200,
            json={
                "data": [{"id": 7, "name": "One", "enabled": False, "iconImageId": 70}],
                "nextPageCursor": "c2",
            },
        )

    states = make_service(handler).list_resources(ResourceType.BADGE)

    assert [(state.id, state.icon_asset_id) for state in states] == [(7, 70), (8, None)]
    assert states[0].fields == {"name": "One", "enabled": False}


def test_create_pass_sends_icon_in_the_same_request(make_service: ServiceFactory) -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"gamePassId": 55, "iconAssetId": 900})

    created = make_service(handler).create(
        ResourceType.PASS,
        {"name": "VIP", "price": 499, "description": "", "for_sale": True},
        icon=b"\x89PNG-bytes",
    )

    assert (created.id, created.icon_asset_id) == (55, 900)
    (request,) = captured
    assert request.method == "POST"
    assert str(request.url) == PASSES_URL
    assert multipart_value(request, "name") == "VIP"
    assert multipart_value(request, "price") == "499"
    assert multipart_value(request, "isForSale") == "true"
    assert b'name="imageFile"; filename="icon.png"' in request.content


def test_create_badge_sends_cost_and_payment_source(make_service: ServiceFactory) -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"id": 77, "iconImageId": 12})

    service = make_service(handler)
    service.payment_source_type = 2
    created = service.create(
        ResourceType.BADGE, {"name": "Welcome", "description": "hi", "enabled": True}
    )

    assert created.id == 77
    (request,) = captured
    assert str(request.url) == f"{APIS}/legacy-badges/v1/universes/{UNIVERSE}/badges"
    assert multipart_value(request, "expectedCost") == "0"
    assert multipart_value(request, "paymentSourceType") == "2"
    assert multipart_value(request, "isActive") == "true"


def test_product_going_off_sale_disables_store_page_first(make_service: ServiceFactory) -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(204)

    make_service(handler).update(ResourceType.PRODUCT, 9, {"for_sale": False, "price": 10})

    assert [request.method for request in captured] == ["PATCH", "PATCH"]
    assert all(str(request.url) == f"{PRODUCTS_URL}/9" for request in captured)
    assert multipart_value(captured[0], "storePageEnabled") == "false"
    assert multipart_value(captured[1], "isForSale") == "false"
    assert multipart_value(captured[1], "price") == "10"


def test_badge_update_uses_json_body(make_service: ServiceFactory) -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={})

    make_service(handler).update(ResourceType.BADGE, 5, {"description": "new", "enabled": False})

    (request,) = captured
    assert str(request.url) == f"{APIS}/legacy-badges/v1/badges/5"
    assert json.loads(request.content) == {"description": "new", "enabled": False}


def test_sequential_calls_share_one_client_and_rate_limiter() -> None:
    built: list[ResilientClient] = []
    mock_factory = make_client_factory(lambda request: httpx.Response(200, json={}))

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = mock_factory(resilience)
        built.append(client)
        return client

    config = _config(RateLimit(max_calls=3, per_seconds=60.0))
    service = RobloxResourceService(config=config, universe_id=UNIVERSE, client_factory=factory)
    with service:
        for remote_id in (1, 2, 3):
            service.update(ResourceType.BADGE, remote_id, {"description": "new"})

        (client,) = built
        limiter = client._limiter  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        assert limiter is not None

        async def has_capacity() -> bool:
            return limiter.has_capacity()

        assert not asyncio.run(has_capacity())

    assert client._client.is_closed  # noqa: SLF001  # type: ignore[reportPrivateUsage]


def test_empty_update_makes_no_request(make_service: ServiceFactory) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request {request.url}")

    make_service(handler).update(ResourceType.PASS, 1, {})


def test_pass_icon_upload_reads_icon_id_back(make_service: ServiceFactory) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PATCH":
            assert b'name="file"; filename="icon.png"' in request.content
            return httpx.Response(204)
        assert str(request.url) == f"{PASSES_URL}/3/creator"
        return httpx.Response(200, json={"gamePassId": 3, "iconAssetId": 4444})

    assert make_service(handler).upload_icon(ResourceType.PASS, 3, b"png") == 4444


def test_badge_icon_upload_returns_target_id(make_service: ServiceFactory) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == f"{APIS}/legacy-publish/v1/badges/8/icon"
        assert b'name="Files"' in request.content
        return httpx.Response(200, json={"targetId": 31337})

    assert make_service(handler).upload_icon(ResourceType.BADGE, 8, b"png") == 31337


def test_fetch_icon_does_not_leak_api_key_to_cdn(make_service: ServiceFactory) -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        if request.url.host == "cdn.example.test":
            return httpx.Response(200, content=b"image-bytes")
        return httpx.Response(200, json={"location": "https://cdn.example.test/asset/1"})

    assert make_service(handler).fetch_icon(123) == b"image-bytes"
    assert str(captured[0].url) == f"{APIS}/asset-delivery-api/v1/assetId/123"
    assert "x-api-key" in captured[0].headers
    assert "x-api-key" not in captured[1].headers


def test_get_resource_returns_none_when_not_found(make_service: ServiceFactory) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"errors": [{"code": 5, "message": "not found"}]})

    assert make_service(handler).get_resource(ResourceType.BADGE, 1) is None


@pytest.mark.parametrize(
    ("response", "error_type"),
    [
        (httpx.Response(401, json={"message": "Invalid API Key"}), UnauthorizedError),
        (httpx.Response(403, json={"errors": [{"message": "forbidden"}]}), UnauthorizedError),
        (httpx.Response(429, headers={"Retry-After": "7"}), RateLimitedError),
        (httpx.Response(503, text="unavailable"), TransientError),
        (httpx.Response(418, text="teapot"), RemoteError),
    ],
)
def test_status_codes_map_to_remote_errors(
    make_service: ServiceFactory, response: httpx.Response, error_type: type[RemoteError]
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    with pytest.raises(error_type) as excinfo:
        make_service(handler).list_resources(ResourceType.PRODUCT)

    if isinstance(excinfo.value, RateLimitedError):
        assert excinfo.value.retry_after == 7.0


def test_rejected_payload_reports_field_and_reason(make_service: ServiceFactory) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400, json={"errors": [{"message": "Price is too low", "field": "price"}]}
        )

    with pytest.raises(RemoteValidationError) as excinfo:
        make_service(handler).create(ResourceType.PRODUCT, {"name": "Coins", "price": 0})

    assert excinfo.value.field == "price"
    assert "Price is too low" in excinfo.value.reason


def test_network_failures_are_transient(make_service: ServiceFactory) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransientError) as excinfo:
        make_service(handler).list_resources(ResourceType.PASS)

    assert isinstance(excinfo.value.cause, httpx.ConnectError)


def test_unexpected_payload_is_a_remote_error(make_service: ServiceFactory) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"gamePasses": [{"name": "missing id"}]})

    with pytest.raises(RemoteError, match="unexpected response payload"):
        make_service(handler).list_resources(ResourceType.PASS)
