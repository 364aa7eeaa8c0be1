"""Debounced editing of a customer through the API.

Field edits are applied to a local form and persisted with PATCH calls by an
``AutosaveController``, so a burst of keystrokes becomes one request.
"""

from __future__ import annotations

from typing import Any

from agency_toolkit.autosave import AutosaveController, SaveStatus
from agency_toolkit.clients.toolkit_client import ToolkitClient
from agency_toolkit.core.config import settings

EDITABLE_FIELDS = ("name", "ghl_location_id", "gbp_place_id", "is_active", "settings")


class CustomerEditSession:
    """Edit one customer with autosave.

    Usage:
        customer = await client.get_customer(customer_id)
        async with CustomerEditSession(client, customer_id, customer.model_dump()) as session:
            session.set_field("name", "Acme Roofing")
            ...
        # leaving the block waits for an in-flight save, pending edits are dropped
    """

    def __init__(
        self,
        client: ToolkitClient,
        customer_id: str,
        initial: dict[str, Any],
        *,
        debounce_seconds: float | None = None,
        enabled: bool | None = None,
    ) -> None:
        self.client = client
        self.customer_id = customer_id
        form = {field: initial.get(field) for field in EDITABLE_FIELDS}
        self.autosave: AutosaveController[dict[str, Any]] = AutosaveController(
            form,
            self._persist,
            debounce_seconds=(
                settings.autosave.debounce_seconds if debounce_seconds is None else debounce_seconds
            ),
            enabled=settings.autosave.enabled if enabled is None else enabled,
            name=f"customer:{customer_id}",
        )

    @property
    def form(self) -> dict[str, Any]:
        return dict(self.autosave.data)

    @property
    def status(self) -> SaveStatus:
        return self.autosave.status

    async def _persist(self, form: dict[str, Any]) -> bool:
        return await self.client.update_customer(self.customer_id, form)

    def set_field(self, field: str, value: Any) -> None:
        """Change one editable field.

        Raises:
            KeyError: If ``field`` is not editable.
        """
        if field not in EDITABLE_FIELDS:
            raise KeyError(field)
        self.autosave.update({**self.autosave.data, field: value})

    async def save_now(self) -> SaveStatus:
        await self.autosave.flush()
        return self.autosave.status

    async def __aenter__(self) -> "CustomerEditSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.autosave.aclose()
