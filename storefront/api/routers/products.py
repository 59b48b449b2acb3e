from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import require_admin
from storefront.data.database import get_db
from storefront.domain.errors import NotFound
from storefront.domain.schemas import Caller, ProductCreate, ProductOut
from storefront.services.product_service import ProductService

router = APIRouter(tags=["products"])


@router.get("/products", response_model=List[ProductOut])
def list_products(q: str | None = Query(None), db: Session = Depends(get_db)):
    return ProductService(db).list_products(q)


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        return ProductService(db).get_product(product_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/admin/products", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_admin),
):
    return ProductService(db).create_product(payload)
