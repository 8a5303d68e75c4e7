# storefront/api/routers/coupons.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import Identity, get_coupon_service, get_identity, require_admin
from storefront.domain.schemas import (
    CouponCreateIn,
    CouponOut,
    CouponUpdateIn,
    CouponValidateIn,
    CouponValidationOut,
    Envelope,
)
from storefront.services.coupon_service import CouponService, coupon_summary

router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.get("", response_model=Envelope[List[CouponOut]])
def list_available(svc: CouponService = Depends(get_coupon_service)):
    return {"success": True, "data": svc.list_available()}


@router.get("/all", response_model=Envelope[List[CouponOut]])
def list_all(
    _: Identity = Depends(require_admin),
    svc: CouponService = Depends(get_coupon_service),
):
    return {"success": True, "data": svc.list_all()}


@router.post("/validate", response_model=Envelope[CouponValidationOut])
def validate_coupon(
    payload: CouponValidateIn,
    svc: CouponService = Depends(get_coupon_service),
):
    result = svc.evaluate(payload.code, payload.subtotal)
    return {
        "success": True,
        "message": "Coupon is valid",
        "data": {
            "coupon": coupon_summary(result["coupon"]),
            "discount": result["discount"],
        },
    }


@router.post("/{code}/use", response_model=Envelope[CouponOut])
def record_usage(
    code: str,
    _: Identity = Depends(get_identity),
    svc: CouponService = Depends(get_coupon_service),
):
    coupon = svc.record_usage(code)
    return {"success": True, "message": "Coupon usage incremented", "data": coupon}


@router.post("", response_model=Envelope[CouponOut], status_code=201)
def create_coupon(
    payload: CouponCreateIn,
    _: Identity = Depends(require_admin),
    svc: CouponService = Depends(get_coupon_service),
):
    coupon = svc.create_coupon(payload)
    return {"success": True, "message": "Coupon created successfully", "data": coupon}


@router.put("/{coupon_id}", response_model=Envelope[CouponOut])
def update_coupon(
    coupon_id: int,
    payload: CouponUpdateIn,
    _: Identity = Depends(require_admin),
    svc: CouponService = Depends(get_coupon_service),
):
    coupon = svc.update_coupon(coupon_id, payload)
    return {"success": True, "message": "Coupon updated successfully", "data": coupon}


@router.delete("/{coupon_id}", response_model=Envelope[None])
def delete_coupon(
    coupon_id: int,
    _: Identity = Depends(require_admin),
    svc: CouponService = Depends(get_coupon_service),
):
    svc.delete_coupon(coupon_id)
    return {"success": True, "message": "Coupon deleted successfully"}
