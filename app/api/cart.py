from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, to_http_exception
from app.database import get_db
from app.models.user import User
from app.schemas.cart import CartItemAdd, CartItemUpdate, CartResponse
from app.schemas.user import MessageResponse
from app.services.cart_service import CartService
from app.services.exceptions import ServiceError

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("/", response_model=CartResponse, summary="Get my cart")
def get_cart(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Cart contents priced at current product prices; created on first access."""
    return CartService(db).summary(user.id)


@router.post(
    "/items",
    response_model=CartResponse,
    summary="Add an item",
    description="Add a product to the cart. Adding a product already in the cart increases its quantity."
)
def add_item(
    item_data: CartItemAdd,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = CartService(db)
    try:
        return service.add_item(user.id, item_data.product_id, item_data.quantity)
    except ServiceError as e:
        raise to_http_exception(e)


@router.put("/items/{item_id}", response_model=CartResponse, summary="Change item quantity")
def update_item(
    item_id: int,
    item_data: CartItemUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = CartService(db)
    try:
        return service.update_item(user.id, item_id, item_data.quantity)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/items/{item_id}", response_model=CartResponse, summary="Remove an item")
def remove_item(
    item_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = CartService(db)
    try:
        return service.remove_item(user.id, item_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/", response_model=MessageResponse, summary="Clear the cart")
def clear_cart(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    CartService(db).clear(user.id)
    return {"message": "Cart cleared successfully"}
