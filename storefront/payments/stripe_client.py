"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
"""
from typing import Any, Dict, List, Optional
import logging

import stripe
from fastapi import Request

from storefront import config
from storefront.errors import CheckoutConfigurationError, GatewayError

logger = logging.getLogger(__name__)

# module storefront.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY.
    - Sans clé: CheckoutConfigurationError (erreur serveur, pas une erreur utilisateur).
    """
    if not config.STRIPE_SECRET_KEY:
        raise CheckoutConfigurationError("STRIPE_SECRET_KEY manquant dans l'environnement")
    stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe

def as_dict(obj: Any) -> Dict[str, Any]:
    # Les objets Stripe ne sont plus des dict dans les versions récentes du SDK
    if isinstance(obj, dict):
        return obj
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)

def create_session(params: Dict[str, Any], idempotency_key: Optional[str] = None) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout.
    - params: paramètres Checkout (line_items, mode, URLs, options d'envoi, remises...)
    - idempotency_key: deux appels avec la même clé renvoient la même session
    - Rejet Stripe => GatewayError avec le message de Stripe tel quel
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.create(idempotency_key=idempotency_key, **params)
    except stripe.StripeError as e:
        message = getattr(e, "user_message", None) or str(e) or "Erreur Stripe"
        logger.warning("stripe.create_session rejetée: %s", message)
        raise GatewayError(message) from e
    return as_dict(session)

def get_session(session_id: str, expand: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Récupère une session Stripe Checkout par son identifiant.
    Retour: dict session incluant "id", "payment_status", "amount_total", etc.
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.retrieve(session_id, expand=expand or [])
    except stripe.StripeError as e:
        raise GatewayError(getattr(e, "user_message", None) or str(e)) from e
    return as_dict(session)

async def parse_event(request: Request):
    """
    Parse et valide un événement Stripe signé (webhook).
    - Lit le body brut + en-tête Stripe-Signature
    - Valide la signature via Webhook.construct_event (STRIPE_WEBHOOK_SECRET)
    Retour: l'objet event si la signature est valide.
    """
    if not config.STRIPE_WEBHOOK_SECRET:
        raise CheckoutConfigurationError("STRIPE_WEBHOOK_SECRET manquant dans l'environnement")
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature") or ""
    return stripe.Webhook.construct_event(payload, sig_header, config.STRIPE_WEBHOOK_SECRET)
