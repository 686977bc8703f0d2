import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from storefront.errors import CheckoutError
from storefront.utils.rate_limit import optional_rate_limit
from storefront.payments import metadata as payments_metadata
from storefront.payments import service as payments_service
from storefront.payments import stripe_client
from storefront.payments.schemas import CheckoutRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Checkout API"])

# module storefront.payments.views
@router.post("/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_checkout_session(payload: CheckoutRequest, request: Request):
    """
    Crée une session Checkout Stripe pour le panier envoyé par le navigateur.
    - Entrée JSON: { "items": [ { "slug": "<slug>", "quantity": <int> }, ... ], "couponCode": "..." }
    - Les prix éventuellement envoyés sont ignorés: re-tarification depuis le catalogue
    - Sécurité: origine de redirection en liste blanche + rate limit (10 req / 60s)
    - Réponses: 200 {ok, id, url, shippingLabel, shippingCost}
      ou {ok: false, message} avec 400 (panier/slug), 500 (configuration), 502 (Stripe), 503 (catalogue)
    """
    result = payments_service.build_session(
        payload.items,
        coupon_code=payload.coupon_code,
        origin=request.headers.get("origin"),
    )
    return JSONResponse(result.body(), status_code=result.status_code)

@router.get("/checkout/session")
def checkout_session_summary(session_id: str = ""):
    """
    Résumé d'une session payée pour la page /success?session_id=...
    - {ok: false, message} si session_id manque ou si Stripe ne la renvoie pas.
    """
    if not session_id.strip():
        return JSONResponse({"ok": False, "message": "session_id manquant dans l'URL"}, status_code=400)
    try:
        return payments_service.get_session_summary(session_id.strip())
    except CheckoutError as e:
        return JSONResponse({"ok": False, "message": e.message}, status_code=e.status_code)
    except Exception:
        logger.exception("Erreur checkout_session_summary")
        return JSONResponse({"ok": False, "message": "Impossible de lire la session"}, status_code=500)

@router.post("/stripe-webhook", include_in_schema=False)
async def webhook_stripe(request: Request):
    """
    Webhook Stripe: journalise checkout.session.completed (suivi / expédition).
    - Signature: valide via stripe_client.parse_event (Stripe-Signature + STRIPE_WEBHOOK_SECRET)
    - Réponse: {"received": true}; 400 si signature/payload invalide, 500 si secret absent
    """
    try:
        event = await stripe_client.parse_event(request)
    except CheckoutError as e:
        logger.error("webhook_stripe: %s", e.message)
        return JSONResponse({"received": False, "message": e.message}, status_code=e.status_code)
    except Exception as e:
        logger.warning("webhook_stripe: vérification de signature échouée: %s", e)
        return JSONResponse({"received": False, "message": f"Webhook Error: {e}"}, status_code=400)

    session = payments_metadata.extract_completed_event(stripe_client.as_dict(event))
    if session is not None:
        payments_service.handle_completed_session(session)
    return {"received": True}
