from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, to_http_exception
from app.database import get_db
from app.models.user import User
from app.schemas.shipping_address import (
    ShippingAddressCreate,
    ShippingAddressResponse,
    ShippingAddressUpdate,
)
from app.schemas.user import MessageResponse
from app.services.exceptions import NotFoundError, ServiceError
from app.services.shipping_address_service import ShippingAddressService

router = APIRouter(prefix="/shipping-addresses", tags=["Shipping Addresses"])


@router.post(
    "/",
    response_model=ShippingAddressResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a shipping address",
    description="Add an address. Marking it primary unsets the previous primary address."
)
def create_address(
    address_data: ShippingAddressCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return ShippingAddressService(db).create(user.id, address_data)


@router.get("/", response_model=list[ShippingAddressResponse], summary="List my addresses")
def list_addresses(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Primary address first, then newest."""
    return ShippingAddressService(db).get_all(user.id)


@router.get("/primary", response_model=ShippingAddressResponse, summary="Get my primary address")
def get_primary_address(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    address = ShippingAddressService(db).get_primary(user.id)
    if not address:
        raise to_http_exception(NotFoundError("No shipping address found"))
    return address


@router.get("/{address_id}", response_model=ShippingAddressResponse, summary="Get address by ID")
def get_address(
    address_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = ShippingAddressService(db)
    try:
        return service.get_by_id(address_id, user)
    except ServiceError as e:
        raise to_http_exception(e)


@router.put("/{address_id}", response_model=ShippingAddressResponse, summary="Update an address")
def update_address(
    address_id: int,
    address_data: ShippingAddressUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = ShippingAddressService(db)
    try:
        return service.update(address_id, address_data, user)
    except ServiceError as e:
        raise to_http_exception(e)


@router.patch("/{address_id}/primary", response_model=ShippingAddressResponse, summary="Make an address primary")
def set_primary_address(
    address_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = ShippingAddressService(db)
    try:
        return service.set_primary(address_id, user)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete(
    "/{address_id}",
    response_model=MessageResponse,
    summary="Delete an address",
    description="Delete an address. The only address cannot be deleted; deleting the primary promotes another."
)
def delete_address(
    address_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = ShippingAddressService(db)
    try:
        service.delete(address_id, user)
    except ServiceError as e:
        raise to_http_exception(e)

    return {"message": "Shipping address deleted successfully"}
