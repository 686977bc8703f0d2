"""
Module 'cart' (côté client): point d'entrée public.
Réunit la règle de stock, le store persistant, le moteur d'envoi, l'aperçu du coupon
et le client HTTP du checkout.
"""

from .stock import clamp_to_stock, normalize_stock
from .models import LineItem, CheckoutLine, CheckoutPayload
from .errors import StaleCartItemError, CheckoutClientError
from .storage import CartStorage, MemoryCartStorage, JsonFileCartStorage
from .shipping import ShippingQuote, compute_shipping, format_amount
from .store import CartStore
from .coupon import CouponPreview, normalize_code
from .checkout_client import CheckoutClient, build_checkout_payload

__all__ = [
    # stock
    "clamp_to_stock",
    "normalize_stock",
    # models
    "LineItem",
    "CheckoutLine",
    "CheckoutPayload",
    # errors
    "StaleCartItemError",
    "CheckoutClientError",
    # storage
    "CartStorage",
    "MemoryCartStorage",
    "JsonFileCartStorage",
    # shipping
    "ShippingQuote",
    "compute_shipping",
    "format_amount",
    # store
    "CartStore",
    "CouponPreview",
    "normalize_code",
    # client
    "CheckoutClient",
    "build_checkout_payload",
]
