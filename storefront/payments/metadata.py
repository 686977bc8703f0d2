"""
Lecture des sessions Stripe (page de succès, webhook).
"""
from typing import Any, Dict, List, Optional

# module storefront.payments.metadata
def _format_address(addr: Optional[Dict[str, Any]]) -> Optional[str]:
    if not addr:
        return None
    city_line = f"{addr.get('postal_code') or ''} {addr.get('city') or ''}".strip()
    parts = [addr.get("line1"), addr.get("line2"), city_line, addr.get("state"), addr.get("country")]
    return "\n".join(p for p in parts if p) or None

def _shipping_details(session: Dict[str, Any]) -> Dict[str, Any]:
    # Selon la version d'API: shipping_details, collected_information.shipping_details ou payment_intent.shipping
    collected = session.get("collected_information") or {}
    payment_intent = session.get("payment_intent")
    pi_shipping = payment_intent.get("shipping") if isinstance(payment_intent, dict) else None
    return session.get("shipping_details") or collected.get("shipping_details") or pi_shipping or {}

def extract_session_summary(session: Dict[str, Any]) -> Dict[str, Any]:
    """
    Résumé d'une session payée pour la page de succès.
    - Montants en unités mineures (centimes), devise en minuscules.
    """
    session = session or {}
    line_items = (session.get("line_items") or {}).get("data") or []
    items: List[Dict[str, Any]] = [
        {
            "description": li.get("description") or "Article",
            "quantity": li.get("quantity") or 0,
            "amountSubtotal": li.get("amount_subtotal") if li.get("amount_subtotal") is not None else (li.get("amount_total") or 0),
        }
        for li in line_items
    ]
    details = _shipping_details(session)
    shipping_cost = (session.get("shipping_cost") or {}).get("amount_total")
    return {
        "ok": True,
        "id": session.get("id"),
        "paymentStatus": session.get("payment_status"),
        "amountTotal": session.get("amount_total"),
        "currency": session.get("currency") or "mxn",
        "customerEmail": (session.get("customer_details") or {}).get("email"),
        "items": items,
        "shippingCost": shipping_cost,
        "shippingName": details.get("name"),
        "shippingAddress": _format_address(details.get("address")),
    }

def extract_completed_event(event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Retourne l'objet session d'un événement checkout.session.completed, sinon None."""
    if (event or {}).get("type") != "checkout.session.completed":
        return None
    return ((event.get("data") or {}).get("object")) or {}
