"""
Section `checkout` du document de configuration marketing.
Seules les constantes d'envoi et le coupon de l'aperçu client intéressent le panier.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from storefront import config
from storefront.errors import RemoteConfigError

# module storefront.remote_config.schemas
class CheckoutSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    free_shipping_min_total: float = Field(default_factory=lambda: config.FREE_SHIPPING_MIN_TOTAL, alias="freeShippingMinTotal", ge=0, strict=True)
    fixed_shipping_fee: float = Field(default_factory=lambda: config.FIXED_SHIPPING_FEE, alias="fixedShippingFee", ge=0, strict=True)
    coupon_code: str = Field(default_factory=lambda: config.COUPON_CODE, alias="couponCode")
    coupon_percent: float = Field(default_factory=lambda: config.COUPON_PERCENT, alias="couponPercent", ge=0, le=100, strict=True)


def parse_settings(doc: Optional[Dict[str, Any]]) -> CheckoutSettings:
    """
    Extrait la section `checkout` du document; absente => valeurs de l'environnement.
    - Section présente mais invalide => RemoteConfigError (pas de repli silencieux).
    """
    if doc is None:
        return CheckoutSettings()
    if not isinstance(doc, dict):
        raise RemoteConfigError("Configuration invalide: un objet JSON est attendu")
    section = doc.get("checkout")
    if section is None:
        return CheckoutSettings()
    try:
        return CheckoutSettings.model_validate(section)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "checkout" for err in e.errors())
        raise RemoteConfigError(f"Configuration checkout invalide: {fields}") from e
