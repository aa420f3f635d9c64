"""HTTP client for the Roblox Open Cloud monetization APIs."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
import pydantic

from rbxsync.adapters.http_resilience import ResilienceConfig, ResilientClient
from rbxsync.domain.errors import (
    NotFoundError,
    RateLimitedError,
    RemoteError,
    RemoteValidationError,
    TransientError,
    UnauthorizedError,
)
from rbxsync.domain.model import ResourceType
from rbxsync.domain.ports import CreatedResource

from .schema import (
    AssetDeliveryResponse,
    BadgeIconResponse,
    BadgePayload,
    DeveloperProductPayload,
    ErrorResponse,
    GamePassPayload,
    ListBadgesResponse,
    ListDeveloperProductsResponse,
    ListGamePassesResponse,
)
from .translator import (
    badge_create_form,
    badge_state,
    badge_update_body,
    developer_product_state,
    game_pass_state,
    icon_part,
    monetization_form,
    product_form,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Mapping
    from types import TracebackType

    from rbxsync.config import RobloxConfig
    from rbxsync.domain.model import FieldValue, RemoteState

    from .translator import FormFields

log = getLogger(__name__)

API_KEY_HEADER = "x-api-key"
PASS_PAGE_SIZE = 100
PRODUCT_PAGE_SIZE = 50
BADGE_PAGE_SIZE = 100


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _error_details(response: httpx.Response) -> tuple[str, str | None]:
    try:
        payload = ErrorResponse.model_validate(response.json())
    except (ValueError, pydantic.ValidationError):
        text = response.text.strip()
        return (text or response.reason_phrase or f"HTTP {response.status_code}"), None
    message = payload.first_message() or response.reason_phrase or f"HTTP {response.status_code}"
    return message, payload.first_field()


def raise_for_status(response: httpx.Response, context: str) -> None:
    """Map an unsuccessful response onto the remote error taxonomy."""

    status = response.status_code
    if response.is_success:
        return
    message, field_name = _error_details(response)
    detail = f"{context}: HTTP {status}: {message}"
    if status in {401, 403}:
        raise UnauthorizedError(detail)
    if status == 404:
        raise NotFoundError(detail)
    if status == 429:
        raise RateLimitedError(detail, retry_after=_retry_after(response))
    if status in {400, 409, 422}:
        raise RemoteValidationError(f"{context}: {message}", field=field_name)
    if status >= 500:
        raise TransientError(detail)
    raise RemoteError(detail)


def _parse[ModelT: pydantic.BaseModel](
    model: type[ModelT], response: httpx.Response, context: str
) -> ModelT:
    try:
        return model.model_validate(response.json())
    except (ValueError, pydantic.ValidationError) as exc:
        raise RemoteError(f"{context}: unexpected response payload") from exc


def _has_body(response: httpx.Response) -> bool:
    return bool(response.content.strip()) and response.content.strip() not in {b"{}", b"null"}


@dataclass(slots=True)
class RobloxResourceService:
    """``RemoteResourceService`` backed by the Roblox Open Cloud endpoints.

    Public calls are synchronous. They share one event loop and one client, and
    with them one rate limiter, until ``close`` is called.
    """

    config: RobloxConfig
    universe_id: int
    payment_source_type: int = 1
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _runner: asyncio.Runner | None = field(default=None, init=False, repr=False)
    _http: ResilientClient | None = field(default=None, init=False, repr=False)

    @property
    def _headers(self) -> dict[str, str]:
        return {API_KEY_HEADER: self.config.api_key}

    def _passes_url(self) -> str:
        return (
            f"{self.config.apis_base_url}/game-passes/v1/universes/{self.universe_id}/game-passes"
        )

    def _products_url(self) -> str:
        return (
            f"{self.config.apis_base_url}/developer-products/v2/universes/"
            f"{self.universe_id}/developer-products"
        )

    def _run[T](self, work: Callable[[ResilientClient], Coroutine[Any, Any, T]]) -> T:
        if self._runner is None:
            self._runner = asyncio.Runner()
        if self._http is None:
            self._http = self.client_factory(self.config.resilience)
        client = self._http

        async def runner() -> T:
            try:
                return await work(client)
            except httpx.TimeoutException as exc:
                raise TransientError(f"request timed out: {exc}", cause=exc) from exc
            except httpx.TransportError as exc:
                raise TransientError(f"network error: {exc}", cause=exc) from exc

        return self._runner.run(runner())

    def close(self) -> None:
        """Close the shared client and its event loop; later calls open fresh ones."""

        runner, client = self._runner, self._http
        self._runner = None
        self._http = None
        if runner is None:
            return
        try:
            if client is not None:
                runner.run(client.aclose())
        finally:
            runner.close()

    def __enter__(self) -> RobloxResourceService:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    # Listing

    def list_resources(self, resource_type: ResourceType) -> list[RemoteState]:
        match resource_type:
            case ResourceType.PASS:
                states = self._run(self._list_passes)
            case ResourceType.PRODUCT:
                states = self._run(self._list_products)
            case ResourceType.BADGE:
                states = self._run(self._list_badges)
        log.debug("Listed %d remote %s", len(states), resource_type.value)
        return states

    async def _list_passes(self, client: ResilientClient) -> list[RemoteState]:
        states: list[RemoteState] = []
        token: str | None = None
        while True:
            params: dict[str, str | int] = {"pageSize": PASS_PAGE_SIZE}
            if token:
                params["pageToken"] = token
            response = await client.get(
                f"{self._passes_url()}/creator", params=params, headers=self._headers
            )
            raise_for_status(response, "list game passes")
            page = _parse(ListGamePassesResponse, response, "list game passes")
            states.extend(game_pass_state(item) for item in page.game_passes)
            token = page.next_page_token
            if not token:
                return states

    async def _list_products(self, client: ResilientClient) -> list[RemoteState]:
        states: list[RemoteState] = []
        token: str | None = None
        while True:
            params: dict[str, str | int] = {"pageSize": PRODUCT_PAGE_SIZE}
            if token:
                params["pageToken"] = token
            response = await client.get(
                f"{self._products_url()}/creator", params=params, headers=self._headers
            )
            raise_for_status(response, "list developer products")
            page = _parse(ListDeveloperProductsResponse, response, "list developer products")
            states.extend(developer_product_state(item) for item in page.developer_products)
            token = page.next_page_token
            if not token:
                return states

    async def _list_badges(self, client: ResilientClient) -> list[RemoteState]:
        states: list[RemoteState] = []
        cursor: str | None = None
        url = f"{self.config.badges_base_url}/v1/universes/{self.universe_id}/badges"
        while True:
            params: dict[str, str | int] = {"limit": BADGE_PAGE_SIZE, "sortOrder": "Asc"}
            if cursor:
                params["cursor"] = cursor
            response = await client.get(url, params=params, headers=self._headers)
            raise_for_status(response, "list badges")
            page = _parse(ListBadgesResponse, response, "list badges")
            states.extend(badge_state(item) for item in page.data)
            cursor = page.next_page_cursor
            if not cursor:
                return states

    # Single resources

    def get_resource(self, resource_type: ResourceType, remote_id: int) -> RemoteState | None:
        async def work(client: ResilientClient) -> RemoteState:
            return await self._get(client, resource_type, remote_id)

        try:
            return self._run(work)
        except NotFoundError:
            return None

    async def _get(
        self, client: ResilientClient, resource_type: ResourceType, remote_id: int
    ) -> RemoteState:
        context = f"get {resource_type.label} {remote_id}"
        match resource_type:
            case ResourceType.PASS:
                response = await client.get(
                    f"{self._passes_url()}/{remote_id}/creator", headers=self._headers
                )
                raise_for_status(response, context)
                return game_pass_state(_parse(GamePassPayload, response, context))
            case ResourceType.PRODUCT:
                response = await client.get(
                    f"{self._products_url()}/{remote_id}/creator", headers=self._headers
                )
                raise_for_status(response, context)
                return developer_product_state(_parse(DeveloperProductPayload, response, context))
            case ResourceType.BADGE:
                response = await client.get(
                    f"{self.config.badges_base_url}/v1/badges/{remote_id}", headers=self._headers
                )
                raise_for_status(response, context)
                return badge_state(_parse(BadgePayload, response, context))

    # Mutations

    def create(
        self,
        resource_type: ResourceType,
        fields: Mapping[str, FieldValue],
        *,
        icon: bytes | None = None,
        expected_cost: int | None = None,
    ) -> CreatedResource:
        async def work(client: ResilientClient) -> CreatedResource:
            match resource_type:
                case ResourceType.PASS:
                    return await self._create_pass(client, fields, icon)
                case ResourceType.PRODUCT:
                    return await self._create_product(client, fields, icon)
                case ResourceType.BADGE:
                    return await self._create_badge(client, fields, icon, expected_cost or 0)

        return self._run(work)

    async def _create_pass(
        self, client: ResilientClient, fields: Mapping[str, FieldValue], icon: bytes | None
    ) -> CreatedResource:
        parts = monetization_form(fields)
        if icon is not None:
            parts.append(icon_part("imageFile", icon))
        response = await client.post(self._passes_url(), files=parts, headers=self._headers)
        raise_for_status(response, "create game pass")
        created = _parse(GamePassPayload, response, "create game pass")
        return CreatedResource(id=created.id, icon_asset_id=created.icon_asset_id)

    async def _create_product(
        self, client: ResilientClient, fields: Mapping[str, FieldValue], icon: bytes | None
    ) -> CreatedResource:
        parts = product_form(fields)
        if icon is not None:
            parts.append(icon_part("imageFile", icon))
        response = await client.post(self._products_url(), files=parts, headers=self._headers)
        raise_for_status(response, "create developer product")
        created = _parse(DeveloperProductPayload, response, "create developer product")
        return CreatedResource(id=created.id, icon_asset_id=created.icon_image_asset_id)

    async def _create_badge(
        self,
        client: ResilientClient,
        fields: Mapping[str, FieldValue],
        icon: bytes | None,
        expected_cost: int,
    ) -> CreatedResource:
        parts: FormFields = badge_create_form(
            fields, payment_source_type=self.payment_source_type, expected_cost=expected_cost
        )
        if icon is not None:
            parts.append(icon_part("files", icon))
        url = f"{self.config.apis_base_url}/legacy-badges/v1/universes/{self.universe_id}/badges"
        response = await client.post(url, files=parts, headers=self._headers)
        raise_for_status(response, "create badge")
        created = _parse(BadgePayload, response, "create badge")
        return CreatedResource(id=created.id, icon_asset_id=created.icon_image_id)

    def update(
        self,
        resource_type: ResourceType,
        remote_id: int,
        fields: Mapping[str, FieldValue],
    ) -> None:
        if not fields:
            return

        async def work(client: ResilientClient) -> None:
            context = f"update {resource_type.label} {remote_id}"
            match resource_type:
                case ResourceType.PASS:
                    response = await client.patch(
                        f"{self._passes_url()}/{remote_id}",
                        files=monetization_form(fields),
                        headers=self._headers,
                    )
                    raise_for_status(response, context)
                case ResourceType.PRODUCT:
                    await self._update_product(client, remote_id, fields, context)
                case ResourceType.BADGE:
                    response = await client.patch(
                        f"{self.config.apis_base_url}/legacy-badges/v1/badges/{remote_id}",
                        json=badge_update_body(fields),
                        headers=self._headers,
                    )
                    raise_for_status(response, context)

        self._run(work)

    async def _update_product(
        self,
        client: ResilientClient,
        remote_id: int,
        fields: Mapping[str, FieldValue],
        context: str,
    ) -> None:
        url = f"{self._products_url()}/{remote_id}"
        # The store page has to be switched off before a product can go off sale.
        if fields.get("for_sale") is False:
            response = await client.patch(
                url, files=[("storePageEnabled", (None, "false"))], headers=self._headers
            )
            raise_for_status(response, context)
        response = await client.patch(url, files=product_form(fields), headers=self._headers)
        raise_for_status(response, context)

    def upload_icon(self, resource_type: ResourceType, remote_id: int, data: bytes) -> int | None:
        async def work(client: ResilientClient) -> int | None:
            context = f"upload icon for {resource_type.label} {remote_id}"
            match resource_type:
                case ResourceType.PASS:
                    response = await client.patch(
                        f"{self._passes_url()}/{remote_id}",
                        files=[icon_part("file", data)],
                        headers=self._headers,
                    )
                case ResourceType.PRODUCT:
                    response = await client.patch(
                        f"{self._products_url()}/{remote_id}",
                        files=[icon_part("imageFile", data)],
                        headers=self._headers,
                    )
                case ResourceType.BADGE:
                    response = await client.post(
                        f"{self.config.apis_base_url}/legacy-publish/v1/badges/{remote_id}/icon",
                        files=[icon_part("Files", data)],
                        headers=self._headers,
                    )
                    raise_for_status(response, context)
                    return _parse(BadgeIconResponse, response, context).target_id
            raise_for_status(response, context)
            if _has_body(response):
                state = (
                    game_pass_state(_parse(GamePassPayload, response, context))
                    if resource_type is ResourceType.PASS
                    else developer_product_state(
                        _parse(DeveloperProductPayload, response, context)
                    )
                )
            else:
                state = await self._get(client, resource_type, remote_id)
            return state.icon_asset_id

        return self._run(work)

    def fetch_icon(self, asset_id: int) -> bytes:
        async def work(client: ResilientClient) -> bytes:
            context = f"download icon asset {asset_id}"
            response = await client.get(
                f"{self.config.apis_base_url}/asset-delivery-api/v1/assetId/{asset_id}",
                headers=self._headers,
            )
            raise_for_status(response, context)
            location = _parse(AssetDeliveryResponse, response, context).location
            # The signed CDN location must not receive the API key.
            download = await client.get(location)
            raise_for_status(download, context)
            return download.content

        return self._run(work)

