from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from agency_toolkit.adapters.storage.base import AbstractCustomerStore
from agency_toolkit.core.auth import get_current_agency
from agency_toolkit.core.stores import get_customer_store
from agency_toolkit.schemas.agency import Agency
from agency_toolkit.schemas.customer import Customer, CustomerCreate, CustomerUpdate, DeleteResponse
from agency_toolkit.services.customer_service import CustomerService

router = APIRouter(tags=["Customers"])


def get_customer_service(
    store: Annotated[AbstractCustomerStore, Depends(get_customer_store)],
) -> CustomerService:
    return CustomerService(store)


CurrentAgency = Annotated[Agency, Depends(get_current_agency)]
Service = Annotated[CustomerService, Depends(get_customer_service)]


@router.get("/customers", response_model=list[Customer])
async def list_customers(agency: CurrentAgency, service: Service) -> list[Customer]:
    """List the agency's customers, newest first."""
    return service.list(agency)


@router.post("/customers", response_model=Customer, status_code=status.HTTP_201_CREATED)
async def create_customer(payload: CustomerCreate, agency: CurrentAgency, service: Service) -> Customer:
    """Create a customer sub-account.

    Agencies on the toolkit plan are capped; the cap returns 403.
    """
    return service.create(agency, payload)


@router.get(
    "/customers/export",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}},
)
async def export_customers(agency: CurrentAgency, service: Service) -> Response:
    """Download the agency's customers as a CSV attachment."""
    filename, content = service.export_csv(agency)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/customers/{customer_id}", response_model=Customer)
async def get_customer(customer_id: str, agency: CurrentAgency, service: Service) -> Customer:
    return service.get(agency, customer_id)


@router.patch("/customers/{customer_id}", response_model=Customer)
async def update_customer(
    customer_id: str,
    payload: CustomerUpdate,
    agency: CurrentAgency,
    service: Service,
) -> Customer:
    """Update the fields present in the body; others are left unchanged."""
    return service.update(agency, customer_id, payload)


@router.delete("/customers/{customer_id}", response_model=DeleteResponse)
async def delete_customer(customer_id: str, agency: CurrentAgency, service: Service) -> DeleteResponse:
    service.delete(agency, customer_id)
    return DeleteResponse()
