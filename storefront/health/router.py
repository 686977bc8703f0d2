from fastapi import APIRouter, Request

from storefront import config
from storefront.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/rate-limit")
def health_rate_limit(request: Request):
    return rate_limit_health_info(request)

@router.get("/env")
def health_env():
    """Indique quelles variables sensibles sont définies (booléens uniquement, jamais les valeurs)."""
    return {
        "STRIPE_SECRET_KEY": bool(config.STRIPE_SECRET_KEY),
        "STRIPE_PUBLIC_KEY": bool(config.STRIPE_PUBLIC_KEY),
        "STRIPE_WEBHOOK_SECRET": bool(config.STRIPE_WEBHOOK_SECRET),
        "STRIPE_COUPON_ID": bool(config.STRIPE_COUPON_ID),
        "COUPON_CODE": bool(config.COUPON_CODE),
        "COUPON_PERCENT": bool(config.COUPON_PERCENT),
        "PRODUCTS_JSON_URL": bool(config.PRODUCTS_JSON_URL),
        "CONFIG_JSON_URL": bool(config.CONFIG_JSON_URL),
    }
