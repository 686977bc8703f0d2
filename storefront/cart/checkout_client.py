"""
Client HTTP du checkout: envoie {items: [{slug, quantity}], couponCode} au serveur et
retourne {id, url, ...} pour rediriger le navigateur vers la page de paiement hébergée.
"""
from typing import Any, Dict, Optional
import logging

import httpx

from storefront import config
from .coupon import CouponPreview
from .errors import CheckoutClientError
from .models import CheckoutPayload
from .store import CartStore

logger = logging.getLogger(__name__)

# module storefront.cart.checkout_client
def build_checkout_payload(store: CartStore, coupon: Optional[CouponPreview] = None) -> Dict[str, Any]:
    """Construit le corps de requête; lève StaleCartItemError pour une ligne d'ancien format."""
    payload = CheckoutPayload(
        items=store.checkout_items(),
        coupon_code=coupon.applied_code if coupon else None,
    )
    return payload.model_dump(by_alias=True, exclude_none=True)


class CheckoutClient:
    def __init__(self, api_url: str, client: Optional[httpx.Client] = None):
        self.api_url = api_url
        # Seul un client créé ici est fermé par close()
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=config.HTTP_TIMEOUT)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "CheckoutClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def create_checkout(self, store: CartStore, coupon: Optional[CouponPreview] = None) -> Dict[str, Any]:
        """
        POST du panier vers l'API de checkout.
        - Erreur réseau ou {ok: false} => CheckoutClientError avec le message du serveur.
        - Retourne la réponse {ok, id, url, shippingLabel, shippingCost}.
        """
        body = build_checkout_payload(store, coupon)
        try:
            resp = self.client.post(self.api_url, json=body)
        except httpx.HTTPError as e:
            logger.warning("checkout_client: requête échouée: %s", e)
            raise CheckoutClientError("Erreur réseau pendant le checkout") from e
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.status_code >= 400 or not data.get("ok"):
            raise CheckoutClientError(data.get("message") or "Erreur lors du checkout", resp.status_code)
        if not data.get("url"):
            raise CheckoutClientError("Aucune URL de paiement reçue", resp.status_code)
        return data
