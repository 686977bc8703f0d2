"""
Cas d'usage 'payments': orchestre catalogue, logique de checkout et Stripe.
build_session ne lève jamais: toute erreur devient {ok: false, message} + code HTTP.
"""
from typing import Any, Dict, Iterable, Optional
import logging

from storefront import config
from storefront.catalog import repository as catalog_repo
from storefront.errors import CheckoutError, InvalidCartError

from . import checkout as checkout_logic
from . import stripe_client
from .metadata import extract_session_summary
from .schemas import CheckoutResult

logger = logging.getLogger(__name__)

# module storefront.payments.service
def create_checkout_session(
    items: Iterable[Any],
    coupon_code: Optional[str] = None,
    origin: Optional[str] = None,
) -> CheckoutResult:
    """
    Construit et crée la session Stripe à partir de {slug, quantity} uniquement.
    Étapes:
      1) Vérifier la configuration Stripe et le panier non vide
      2) Choisir une origine de redirection sûre (liste blanche, sinon SITE_URL)
      3) Charger le catalogue (cache court) et re-tarifer chaque ligne
      4) Calculer l'envoi, résoudre le coupon, dériver la clé d'idempotence
      5) Créer la session Stripe
    Lève CheckoutError (sous-classes) en cas d'échec.
    """
    items = list(items or [])
    stripe_client.require_stripe()
    if not items:
        raise InvalidCartError("Panier vide")

    base_url = checkout_logic.resolve_base_url(origin)
    quantities = checkout_logic.aggregate_quantities(items)
    catalog = catalog_repo.get_catalog_map()
    lines = checkout_logic.price_lines(catalog, quantities)

    quote = checkout_logic.quote_shipping(lines)
    discount_params, coupon_applied = checkout_logic.resolve_discount(coupon_code)
    idempotency_key = checkout_logic.make_idempotency_key(lines, coupon_code, base_url)

    params: Dict[str, Any] = {
        "mode": "payment",
        "line_items": checkout_logic.to_line_items(lines, base_url),
        "shipping_address_collection": {"allowed_countries": config.SHIPPING_COUNTRIES},
        "phone_number_collection": {"enabled": True},
        "customer_creation": "always",
        "success_url": f"{base_url}{config.CHECKOUT_SUCCESS_PATH}?session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{base_url}{config.CHECKOUT_CANCEL_PATH}",
        "metadata": checkout_logic.make_metadata(lines, coupon_applied, quote, idempotency_key),
        **discount_params,
    }
    shipping_options = checkout_logic.to_shipping_options(quote)
    if shipping_options:
        params["shipping_options"] = shipping_options

    session = stripe_client.create_session(params, idempotency_key=idempotency_key)
    session_id = session.get("id")
    url = session.get("url")
    logger.info(
        "payments.checkout session=%s lines=%s coupon=%s shipping=%s key=%s",
        session_id, len(lines), coupon_applied, quote.shipping_cost, idempotency_key,
    )
    if not url:
        raise CheckoutError("Session Stripe invalide (URL manquante)", status_code=502)
    return CheckoutResult(
        ok=True,
        id=session_id,
        url=url,
        shipping_label=quote.label,
        shipping_cost=quote.shipping_cost,
    )

def build_session(
    items: Iterable[Any],
    coupon_code: Optional[str] = None,
    origin: Optional[str] = None,
) -> CheckoutResult:
    """Variante qui ne lève pas: convertit les erreurs en CheckoutResult(ok=False)."""
    try:
        return create_checkout_session(items, coupon_code=coupon_code, origin=origin)
    except CheckoutError as e:
        if e.status_code >= 500:
            logger.error("payments.build_session: %s", e.message)
        return CheckoutResult(ok=False, message=e.message, status_code=e.status_code)
    except Exception:
        logger.exception("Erreur build_session")
        return CheckoutResult(ok=False, message="Erreur interne lors du checkout", status_code=500)

def get_session_summary(session_id: str) -> Dict[str, Any]:
    """Lit une session (avec ses lignes) pour la page de succès."""
    session = stripe_client.get_session(session_id, expand=["line_items", "payment_intent"])
    return extract_session_summary(session)

def handle_completed_session(session: Dict[str, Any]) -> None:
    """Paiement confirmé (webhook): journalisation pour le suivi et l'expédition."""
    logger.info(
        "payments.webhook paiement confirmé session=%s montant=%s %s email=%s",
        session.get("id"),
        session.get("amount_total"),
        session.get("currency"),
        (session.get("customer_details") or {}).get("email"),
    )
