"""
Module 'payments' (feature-first): point d'entrée public.
Réunit la logique de checkout, le client Stripe, la lecture des sessions et les services.
"""

from .checkout import (
    aggregate_quantities,
    resolve_base_url,
    effective_quantity,
    price_lines,
    to_line_items,
    to_shipping_options,
    resolve_discount,
    make_idempotency_key,
    make_metadata,
)
from .metadata import extract_session_summary, extract_completed_event
from .stripe_client import require_stripe, create_session, get_session, parse_event
from .schemas import CheckoutRequest, CheckoutItemIn, CheckoutResult
from .service import create_checkout_session, build_session, get_session_summary

__all__ = [
    # checkout
    "aggregate_quantities",
    "resolve_base_url",
    "effective_quantity",
    "price_lines",
    "to_line_items",
    "to_shipping_options",
    "resolve_discount",
    "make_idempotency_key",
    "make_metadata",
    # metadata
    "extract_session_summary",
    "extract_completed_event",
    # stripe
    "require_stripe",
    "create_session",
    "get_session",
    "parse_event",
    # schemas
    "CheckoutRequest",
    "CheckoutItemIn",
    "CheckoutResult",
    # services
    "create_checkout_session",
    "build_session",
    "get_session_summary",
]
