# storefront/api/routers/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_catalog
from storefront.domain.schemas import Envelope, ProductOut
from storefront.services.catalog_service import CatalogResolver

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=Envelope[List[ProductOut]])
def list_products(
    category: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    include_unavailable: bool = Query(False, alias="includeUnavailable"),
    catalog: CatalogResolver = Depends(get_catalog),
):
    products = catalog.list_products(
        category=category,
        featured=featured,
        include_unavailable=include_unavailable,
    )
    return {"success": True, "data": products}


@router.get("/{reference}", response_model=Envelope[ProductOut])
def get_product(reference: str, catalog: CatalogResolver = Depends(get_catalog)):
    """Produkt po kanonicznym UUID albo po starym numerycznym id."""
    return {"success": True, "data": catalog.resolve(reference)}
