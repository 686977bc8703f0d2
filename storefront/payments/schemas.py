"""
Corps de requête/réponse de l'API checkout.
Le client n'envoie que slug + quantité: tout autre champ (prix, nom...) est ignoré.
"""
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# module storefront.payments.schemas
class CheckoutItemIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    slug: str = Field(min_length=1)
    quantity: float = 1


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    items: List[CheckoutItemIn] = Field(default_factory=list)
    coupon_code: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("couponCode", "coupon", "coupon_code"),
    )


class CheckoutResult(BaseModel):
    """Résultat de build_session: {ok, id, url, ...} ou {ok: false, message} + code HTTP."""
    ok: bool
    id: Optional[str] = None
    url: Optional[str] = None
    shipping_label: Optional[str] = None
    shipping_cost: Optional[float] = None
    message: Optional[str] = None
    status_code: int = 200

    def body(self) -> Dict[str, Any]:
        if not self.ok:
            return {"ok": False, "message": self.message}
        return {
            "ok": True,
            "id": self.id,
            "url": self.url,
            "shippingLabel": self.shipping_label,
            "shippingCost": self.shipping_cost,
        }
