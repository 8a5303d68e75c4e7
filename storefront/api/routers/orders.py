# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import Identity, get_identity, get_order_service, require_admin
from storefront.domain.schemas import Envelope, OrderCreateIn, OrderOut, OrderStatusIn
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=Envelope[List[OrderOut]])
def list_orders(
    identity: Identity = Depends(get_identity),
    svc: OrderService = Depends(get_order_service),
):
    return {"success": True, "data": svc.list_orders(identity.user_id)}


@router.get("/{order_id}", response_model=Envelope[OrderOut])
def get_order(
    order_id: int,
    identity: Identity = Depends(get_identity),
    svc: OrderService = Depends(get_order_service),
):
    return {"success": True, "data": svc.get_order(order_id, identity.user_id)}


@router.post("", response_model=Envelope[OrderOut], status_code=201)
def create_order(
    payload: OrderCreateIn,
    identity: Identity = Depends(get_identity),
    svc: OrderService = Depends(get_order_service),
):
    """
    Tworzy zamowienie z koszyka uzytkownika.
    Koszyk czyszczony po zapisie zamowienia.
    """
    order = svc.checkout(identity.user_id, payload)
    return {"success": True, "message": "Order created successfully", "data": order}


@router.put("/{order_id}/status", response_model=Envelope[OrderOut])
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    _: Identity = Depends(require_admin),
    svc: OrderService = Depends(get_order_service),
):
    order = svc.update_status(order_id, payload.status)
    return {"success": True, "message": "Order status updated", "data": order}
