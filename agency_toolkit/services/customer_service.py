"""Customer sub-account management.

Business rules for the customer endpoints: required-field validation, the
toolkit plan's customer cap, token issuance, partial updates and the CSV
export. All reads and writes go through the tenant-scoped customer store.
"""

from __future__ import annotations

import logging
from datetime import date

from agency_toolkit.adapters.storage.base import AbstractCustomerStore
from agency_toolkit.core.config import settings
from agency_toolkit.core.errors import NotFoundAppError, PermissionAppError, ValidationAppError
from agency_toolkit.schemas.agency import Agency
from agency_toolkit.schemas.customer import Customer, CustomerCreate, CustomerUpdate
from agency_toolkit.utils.csv_export import build_csv
from agency_toolkit.utils.tokens import generate_customer_token

logger = logging.getLogger(__name__)

EXPORT_HEADERS = (
    "Name",
    "Token",
    "GHL Location ID",
    "GBP Place ID",
    "Active",
    "Created Date",
)


def _not_found() -> NotFoundAppError:
    return NotFoundAppError(code="customer_not_found", message="Customer not found")


class CustomerService:
    """CRUD and export of an agency's customers.

    Attributes:
        customers: Tenant-scoped customer store.
    """

    def __init__(self, customers: AbstractCustomerStore) -> None:
        self.customers = customers

    def list(self, agency: Agency) -> list[Customer]:
        return self.customers.list_for_agency(agency.id)

    def get(self, agency: Agency, customer_id: str) -> Customer:
        customer = self.customers.get(agency.id, customer_id)
        if customer is None:
            raise _not_found()
        return customer

    def _check_plan_limit(self, agency: Agency) -> None:
        if agency.plan != "toolkit":
            return
        limit = settings.app.toolkit_customer_limit
        count = self.customers.count(agency.id)
        if count >= limit:
            logger.info(
                "customers.limit_reached",
                extra={"agency_id": agency.id, "limit": limit, "count": count},
            )
            raise PermissionAppError(
                code="customer_limit_reached",
                message="Customer limit reached. Upgrade to Pro for unlimited customers.",
                details={"limit": limit, "actual_value": count},
            )

    def create(self, agency: Agency, payload: CustomerCreate) -> Customer:
        """Create a customer for ``agency``.

        Raises:
            PermissionAppError: If a toolkit-plan agency is at its cap.
            ValidationAppError: If the name is blank.
        """
        self._check_plan_limit(agency)

        name = payload.name.strip()
        if not name:
            raise ValidationAppError(
                code="name_required",
                message="Name is required",
                details={"field": "name"},
            )

        customer = self.customers.insert(
            agency.id,
            {
                "name": name,
                "token": generate_customer_token(name),
                "ghl_location_id": payload.ghl_location_id or None,
                "gbp_place_id": payload.gbp_place_id or None,
            },
        )
        logger.info("customers.created", extra={"agency_id": agency.id, "customer_id": customer.id})
        return customer

    def update(self, agency: Agency, customer_id: str, payload: CustomerUpdate) -> Customer:
        """Apply the fields present in ``payload``; absent fields are untouched."""
        changes = payload.model_dump(exclude_unset=True)
        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise ValidationAppError(
                    code="name_required",
                    message="Name is required",
                    details={"field": "name"},
                )
            changes["name"] = name
        if "is_active" in changes and changes["is_active"] is None:
            del changes["is_active"]
        if "settings" in changes and changes["settings"] is None:
            changes["settings"] = {}

        customer = self.customers.update(agency.id, customer_id, changes)
        if customer is None:
            raise _not_found()
        logger.info(
            "customers.updated",
            extra={"agency_id": agency.id, "customer_id": customer_id, "fields": sorted(changes)},
        )
        return customer

    def delete(self, agency: Agency, customer_id: str) -> None:
        if not self.customers.delete(agency.id, customer_id):
            raise _not_found()
        logger.info("customers.deleted", extra={"agency_id": agency.id, "customer_id": customer_id})

    def export_csv(self, agency: Agency, *, today: date | None = None) -> tuple[str, str]:
        """Render the agency's customers as CSV.

        Returns:
            Tuple of (filename, csv_content).

        Raises:
            NotFoundAppError: If the agency has no customers.
        """
        customers = self.customers.list_for_agency(agency.id)
        if not customers:
            raise NotFoundAppError(code="no_customers", message="No customers to export")

        rows = [
            (
                c.name or "",
                c.token or "",
                c.ghl_location_id or "",
                c.gbp_place_id or "",
                "Yes" if c.is_active else "No",
                c.created_at.date().isoformat(),
            )
            for c in customers
        ]
        filename = f"customers-{(today or date.today()).isoformat()}.csv"
        logger.info("customers.exported", extra={"agency_id": agency.id, "rows": len(rows)})
        return filename, build_csv(EXPORT_HEADERS, rows)
