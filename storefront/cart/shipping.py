"""
Moteur d'éligibilité à la livraison gratuite (logique pure, recalculée à chaque mutation).
Ordre de priorité:
  1) un article "custom" => envoi sur devis, coût 0, jamais gratuit
  2) tous les articles en livraison gratuite + sous-total >= seuil => gratuit
  3) 0 < sous-total < seuil => frais fixes + montant restant pour la gratuité
  4) sous-total >= seuil sans gratuité => frais fixes
  5) panier vide => coût 0, libellé vide
"""
from typing import Any, Iterable, Optional

from pydantic import BaseModel

# module storefront.cart.shipping
CUSTOM_SHIPPING_LABEL = "Contient des articles avec envoi sur devis"
FREE_SHIPPING_LABEL = "Livraison gratuite"


def format_amount(amount: float) -> str:
    """$499 si entier, sinon $199.60."""
    if float(amount).is_integer():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"


class ShippingQuote(BaseModel):
    has_custom_shipping: bool = False
    all_items_free_shipping: bool = False
    qualifies_for_free_shipping: bool = False
    subtotal: float = 0.0
    shipping_cost: float = 0.0
    label: str = ""
    # Montant manquant pour atteindre le seuil (règle 3 uniquement)
    remaining_for_free_shipping: Optional[float] = None


def compute_shipping(items: Iterable[Any], free_shipping_min_total: float, fixed_shipping_fee: float) -> ShippingQuote:
    """
    Calcule coût et libellé d'envoi pour un ensemble de lignes.
    - items: objets exposant price, quantity, free_shipping, shipping_type (LineItem).
    - Fonction pure de (lignes, seuil, frais): aucun cache.
    """
    lines = list(items)
    if not lines:
        return ShippingQuote()

    subtotal = sum(i.price * i.quantity for i in lines)
    has_custom = any(i.shipping_type == "custom" for i in lines)
    all_free = all(i.free_shipping is True for i in lines)
    qualifies = all_free and subtotal >= free_shipping_min_total and not has_custom

    quote = ShippingQuote(
        has_custom_shipping=has_custom,
        all_items_free_shipping=all_free,
        qualifies_for_free_shipping=qualifies,
        subtotal=subtotal,
    )
    if has_custom:
        quote.label = CUSTOM_SHIPPING_LABEL
    elif qualifies:
        quote.label = FREE_SHIPPING_LABEL
    elif 0 < subtotal < free_shipping_min_total:
        remaining = round(free_shipping_min_total - subtotal, 2)
        quote.shipping_cost = fixed_shipping_fee
        quote.remaining_for_free_shipping = remaining
        quote.label = f"Plus que {format_amount(remaining)} pour obtenir la livraison gratuite"
    elif subtotal >= free_shipping_min_total:
        quote.shipping_cost = fixed_shipping_fee
        quote.label = f"Frais d'envoi fixes : {format_amount(fixed_shipping_fee)}"
    return quote
