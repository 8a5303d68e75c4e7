# storefront/api/routers/cart.py
from fastapi import APIRouter, Depends

from storefront.api.deps import Identity, get_cart_service, get_identity
from storefront.domain.schemas import CartItemIn, CartItemUpdateIn, CartOut, Envelope
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=Envelope[CartOut])
def get_cart(
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_cart_service),
):
    return {"success": True, "data": svc.get_cart(identity.user_id)}


@router.post("", response_model=Envelope[CartOut])
def add_item(
    payload: CartItemIn,
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.add_item(identity.user_id, payload.product_id, payload.quantity)
    return {"success": True, "message": "Item added to cart", "data": cart}


@router.put("/{line_id}", response_model=Envelope[CartOut])
def update_item(
    line_id: int,
    payload: CartItemUpdateIn,
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.update_quantity(
        identity.user_id,
        line_id,
        payload.quantity,
        expected_version=payload.version,
    )
    return {"success": True, "message": "Cart item updated", "data": cart}


@router.delete("/{line_id}", response_model=Envelope[CartOut])
def remove_item(
    line_id: int,
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.remove_item(identity.user_id, line_id)
    return {"success": True, "message": "Item removed from cart", "data": cart}


@router.delete("", response_model=Envelope[CartOut])
def clear_cart(
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_cart_service),
):
    return {"success": True, "message": "Cart cleared", "data": svc.clear(identity.user_id)}
