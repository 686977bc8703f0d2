"""
Modèles du panier côté client (ligne de panier, requête de checkout).
- Schéma cible: clé `slug`, `shippingType` présent.
- Les anciens enregistrements (clé par nom, sans shippingType) sont migrés au chargement.
"""
from typing import Any, Dict, Literal, Optional
import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .stock import clamp_to_stock, normalize_stock

logger = logging.getLogger(__name__)

ShippingType = Literal["standard", "custom"]

# module storefront.cart.models
class LineItem(BaseModel):
    """Une ligne du panier. `price` est indicatif: le serveur re-calcule le montant facturé."""
    model_config = ConfigDict(populate_by_name=True)

    slug: Optional[str] = None
    name: str = ""
    image: str = ""
    price: float = 0.0
    quantity: int = 1
    free_shipping: bool = Field(default=False, alias="freeShipping")
    max_stock: Optional[int] = Field(default=None, alias="maxStock")
    shipping_type: ShippingType = Field(default="standard", alias="shippingType")

    @field_validator("slug", mode="before")
    @classmethod
    def _blank_slug_is_missing(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        s = str(v).strip()
        return s or None

    @field_validator("free_shipping", mode="before")
    @classmethod
    def _strict_true(cls, v: Any) -> bool:
        # Seul `true` active la livraison gratuite
        return v is True

    @field_validator("max_stock", mode="before")
    @classmethod
    def _normalize_stock(cls, v: Any) -> Optional[int]:
        return normalize_stock(v)

    @field_validator("shipping_type", mode="before")
    @classmethod
    def _default_shipping_type(cls, v: Any) -> str:
        return "custom" if v == "custom" else "standard"

    @property
    def key(self) -> str:
        """Identifiant dans le panier: le slug, ou le nom pour une ligne d'ancien format."""
        return self.slug if self.slug else f"legacy:{self.name}"

    @property
    def is_stale(self) -> bool:
        """True si la ligne vient d'un ancien schéma (pas de slug): l'utilisateur doit la ré-ajouter."""
        return not self.slug

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def with_quantity(self, quantity: int) -> "LineItem":
        return self.model_copy(update={"quantity": quantity})

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_storage(cls, raw: Dict[str, Any]) -> Optional["LineItem"]:
        """
        Reconstruit une ligne persistée en revalidant la quantité contre son propre stock.
        - Retourne None si la quantité revalidée vaut 0 (la ligne n'est jamais stockée à 0).
        """
        data = dict(raw)
        max_stock = normalize_stock(data.get("maxStock", data.get("max_stock")))
        data["quantity"] = clamp_to_stock(data.get("quantity"), max_stock)
        if data["quantity"] <= 0:
            return None
        return cls.model_validate(data)

    @classmethod
    def from_catalog(cls, item: Any) -> "LineItem":
        """Construit une ligne (quantité 1, avant plafonnement) depuis un CatalogItem."""
        return cls(
            slug=item.slug,
            name=item.name,
            image=item.image,
            price=item.unit_price,
            quantity=1,
            free_shipping=item.free_shipping,
            max_stock=item.max_qty,
            shipping_type=item.shipping_type,
        )


class CheckoutLine(BaseModel):
    slug: str
    quantity: int


class CheckoutPayload(BaseModel):
    """Seules données envoyées au serveur: slug + quantité, jamais de prix."""
    model_config = ConfigDict(populate_by_name=True)

    items: list[CheckoutLine]
    coupon_code: Optional[str] = Field(default=None, alias="couponCode")
