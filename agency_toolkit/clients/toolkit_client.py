"""Async HTTP client for the agency toolkit API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from agency_toolkit.schemas.customer import Customer
from agency_toolkit.schemas.notification import NotificationListResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0


class ToolkitClient:
    """Thin wrapper over ``httpx.AsyncClient`` authenticated with an agency API key.

    Usage:
        async with ToolkitClient("https://toolkit.example.com", api_key="...") as client:
            customer = await client.get_customer(customer_id)
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Root URL of the API (without the ``/v1`` prefix).
            api_key: Agency API key sent as ``X-API-Key``.
            timeout_seconds: Per-request timeout.
            transport: Optional transport (e.g. ``httpx.MockTransport`` or an
                ``ASGITransport`` wrapping the app in tests).
        """
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/v1",
            headers={"X-API-Key": api_key},
            timeout=timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "ToolkitClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_customer(self, customer_id: str) -> Customer:
        """Fetch one customer.

        Raises:
            httpx.HTTPStatusError: On any non-2xx response.
        """
        response = await self._client.get(f"/customers/{customer_id}")
        response.raise_for_status()
        return Customer.model_validate(response.json())

    async def update_customer(self, customer_id: str, changes: dict[str, Any]) -> bool:
        """PATCH the given fields of a customer.

        Returns:
            True on a 2xx response. Transport errors and error responses are
            logged and reported as False.
        """
        try:
            response = await self._client.patch(f"/customers/{customer_id}", json=changes)
        except httpx.HTTPError as exc:
            logger.error(
                "toolkit_client.request_failed",
                extra={
                    "customer_id": customer_id,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return False

        if response.is_success:
            return True

        try:
            error = response.json().get("error")
        except ValueError:
            error = None
        logger.warning(
            "toolkit_client.update_rejected",
            extra={"customer_id": customer_id, "status": response.status_code, "error": error},
        )
        return False

    async def list_notifications(
        self,
        *,
        unread_only: bool = False,
        limit: int | None = None,
    ) -> NotificationListResponse:
        params: dict[str, Any] = {"unread_only": str(unread_only).lower()}
        if limit is not None:
            params["limit"] = limit
        response = await self._client.get("/notifications", params=params)
        response.raise_for_status()
        return NotificationListResponse.model_validate(response.json())
