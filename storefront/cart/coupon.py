"""
Aperçu du coupon côté client (indicatif uniquement: le montant facturé est calculé par le serveur).
- apply(code): compare code saisi et code configuré (trim + majuscules).
- Recalcul réactif: abonné au CartStore, la remise suit sous-total et frais d'envoi.
- Panier vide => coupon retiré, remise à 0.
"""
from typing import Any, Optional
import logging

from .store import CartStore

logger = logging.getLogger(__name__)

STATUS_APPLIED = "applied"
STATUS_INVALID = "invalid"
STATUS_EMPTY = "empty"

# module storefront.cart.coupon
def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


class CouponPreview:
    def __init__(self, store: CartStore, valid_code: Optional[str], percent: float):
        self.store = store
        self.valid_code = normalize_code(valid_code)
        self.percent = float(percent or 0)
        self.applied_code: Optional[str] = None
        self.discount_amount = 0.0
        self.unsubscribe = store.subscribe(self._on_cart_change)

    @classmethod
    def from_settings(cls, store: CartStore, settings: Any) -> "CouponPreview":
        return cls(store, settings.coupon_code, settings.coupon_percent)

    def apply(self, input_code: Optional[str]) -> str:
        """
        Applique un code. Retourne un statut ("applied", "invalid", "empty"), ne lève jamais.
        """
        code = normalize_code(input_code)
        if not code:
            self.reset()
            return STATUS_EMPTY
        if self.valid_code and code == self.valid_code and self.percent > 0:
            self.applied_code = self.valid_code
            self.discount_amount = self._compute()
            return STATUS_APPLIED
        self.reset()
        return STATUS_INVALID

    def reset(self) -> None:
        self.applied_code = None
        self.discount_amount = 0.0

    @property
    def base_amount(self) -> float:
        """Sous-total + frais d'envoi (sauf envoi sur devis)."""
        quote = self.store.shipping
        return self.store.subtotal + (0 if quote.has_custom_shipping else quote.shipping_cost)

    @property
    def displayed_total(self) -> float:
        return max(0.0, self.base_amount - self.discount_amount)

    @property
    def message(self) -> str:
        if self.applied_code:
            return f"Coupon appliqué : -{self.percent:g}%"
        return ""

    def _compute(self) -> float:
        return self.percent / 100 * self.base_amount

    def _on_cart_change(self, store: CartStore) -> None:
        if len(store) == 0:
            self.reset()
        elif self.applied_code:
            self.discount_amount = self._compute()
