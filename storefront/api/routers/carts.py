# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_caller
from storefront.data.database import get_db
from storefront.domain.errors import NotFound, InsufficientInventory, InvalidQuantity
from storefront.domain.schemas import Caller, ItemIn, CartOut
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def view_cart(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    return CartService(db).view_cart(caller.user_id)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.add_to_cart(caller.user_id, payload.product_id, payload.quantity)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (InsufficientInventory, InvalidQuantity) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(
    product_id: int,
    quantity: int = Query(..., gt=0),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.remove_from_cart(caller.user_id, product_id, quantity)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidQuantity as e:
        raise HTTPException(status_code=400, detail=str(e))
