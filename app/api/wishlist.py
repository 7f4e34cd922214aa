from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, to_http_exception
from app.database import get_db
from app.models.user import User
from app.schemas.user import MessageResponse
from app.schemas.wishlist import WishlistCheck, WishlistItemAdd, WishlistResponse
from app.services.exceptions import ServiceError
from app.services.wishlist_service import WishlistService

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])


@router.get("/", response_model=WishlistResponse, summary="Get my wishlist")
def get_wishlist(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Saved products with their current price; created on first access."""
    return WishlistService(db).summary(user.id)


@router.get(
    "/check/{product_id}",
    response_model=WishlistCheck,
    summary="Is a product in my wishlist"
)
def check_product(
    product_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"product_id": product_id, "in_wishlist": WishlistService(db).contains(user.id, product_id)}


@router.post(
    "/items",
    response_model=WishlistResponse,
    summary="Save a product",
    description="Save an active product to the wishlist. Saving the same product twice is a conflict."
)
def add_item(
    item_data: WishlistItemAdd,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = WishlistService(db)
    try:
        return service.add_item(user.id, item_data.product_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/items/{product_id}", response_model=WishlistResponse, summary="Remove a saved product")
def remove_item(
    product_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    service = WishlistService(db)
    try:
        return service.remove_item(user.id, product_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/", response_model=MessageResponse, summary="Clear the wishlist")
def clear_wishlist(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    WishlistService(db).clear(user.id)
    return {"message": "Wishlist cleared successfully"}
