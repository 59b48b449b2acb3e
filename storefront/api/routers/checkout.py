# storefront/api/routers/checkout.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_caller, get_payment_client, get_lock_service
from storefront.data.database import get_db
from storefront.domain.errors import CartEmpty, CheckoutInProgress, InsufficientInventory, NotFound
from storefront.domain.schemas import Caller, CheckoutOut
from storefront.services.checkout_service import CheckoutService
from storefront.services.lock_service import LockService
from storefront.services.payment_client import PaymentClient

router = APIRouter(tags=["checkout"])


@router.post("/checkout", response_model=CheckoutOut)
def checkout(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
    payment_client: PaymentClient = Depends(get_payment_client),
    lock_service: LockService = Depends(get_lock_service),
):
    """
    Reserves stock for the whole cart and creates a payment intent.
    Gateway and store faults are handled by the app-level handlers.
    """
    svc = CheckoutService(db, payment_client=payment_client, lock_service=lock_service)
    try:
        return svc.checkout(caller.user_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (CartEmpty, InsufficientInventory) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CheckoutInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
