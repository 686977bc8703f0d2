"""
Logique pure de construction de la session de paiement (pas d'appel Stripe, pas de réseau).
- Les prix viennent toujours du catalogue, jamais du client.
"""
from typing import Any, Dict, Iterable, List, Optional, Tuple
import hashlib
import json

from pydantic import ValidationError

from storefront import config
from storefront.cart.coupon import normalize_code
from storefront.cart.models import LineItem
from storefront.cart.shipping import ShippingQuote, compute_shipping
from storefront.cart.stock import clamp_to_stock
from storefront.catalog.schemas import CatalogItem
from storefront.errors import InvalidCartError, UnknownProductError

from .schemas import CheckoutItemIn

# module storefront.payments.checkout
def aggregate_quantities(items: Iterable[Any]) -> Dict[str, int]:
    """
    Agrège [{slug, quantity}, ...] en {slug: quantité totale} (ordre d'arrivée conservé).
    - Quantité non entière: arrondie à l'entier inférieur (>= 0).
    - Accepte des dicts {slug, quantity} ou des objets exposant ces attributs.
    - InvalidCartError si aucune ligne ou si une ligne est mal formée.
    """
    quantities: Dict[str, int] = {}
    for index, it in enumerate(items or []):
        try:
            line = it if isinstance(it, CheckoutItemIn) else CheckoutItemIn.model_validate(it, from_attributes=True)
        except ValidationError as e:
            raise InvalidCartError(f"Ligne de panier invalide (position {index})") from e
        slug = line.slug.strip()
        quantities[slug] = quantities.get(slug, 0) + clamp_to_stock(line.quantity)
    if not quantities:
        raise InvalidCartError("Panier vide")
    return quantities

def resolve_base_url(origin: Optional[str]) -> str:
    """
    Origine sûre pour les redirections: l'en-tête Origin seulement s'il est dans ALLOWED_ORIGINS,
    sinon SITE_URL (empêche une redirection ouverte via un Origin forgé).
    """
    candidate = (origin or "").strip().rstrip("/")
    if candidate and candidate in config.ALLOWED_ORIGINS:
        return candidate
    return config.SITE_URL

def effective_quantity(requested: int, item: CatalogItem) -> int:
    """Quantité bornée par le stock catalogue (ou DEFAULT_MAX_QTY), plancher à 1."""
    cap = item.max_qty if item.max_qty is not None else config.DEFAULT_MAX_QTY
    return max(1, clamp_to_stock(requested, cap))

def to_unit_amount(price: float) -> int:
    """Prix -> unités mineures (centimes), arrondi."""
    return int(round(price * 100))

def absolute_image(image: str, base_url: str) -> str:
    if not image or image.startswith(("http://", "https://")):
        return image
    return f"{base_url}{'' if image.startswith('/') else '/'}{image}"

def price_lines(catalog: Dict[str, CatalogItem], quantities: Dict[str, int]) -> List[LineItem]:
    """
    Re-valide chaque ligne contre le catalogue et retourne les lignes autoritaires.
    - Slug absent du catalogue => UnknownProductError (toute la requête échoue).
    """
    lines: List[LineItem] = []
    for slug, qty in quantities.items():
        item = catalog.get(slug)
        if item is None:
            raise UnknownProductError(slug)
        lines.append(LineItem.from_catalog(item).with_quantity(effective_quantity(qty, item)))
    return lines

def to_line_items(lines: List[LineItem], base_url: str, currency: Optional[str] = None) -> List[Dict[str, Any]]:
    """Construit les line_items Stripe (nom, image, prix unitaire catalogue en centimes, quantité)."""
    currency = currency or config.CHECKOUT_CURRENCY
    line_items: List[Dict[str, Any]] = []
    for line in lines:
        image = absolute_image(line.image, base_url)
        line_items.append({
            "quantity": line.quantity,
            "price_data": {
                "currency": currency,
                "unit_amount": to_unit_amount(line.price),
                "product_data": {
                    "name": line.name[:200],
                    "images": [image] if image else [],
                    "metadata": {"slug": line.slug},
                },
            },
        })
    return line_items

def quote_shipping(lines: List[LineItem]) -> ShippingQuote:
    return compute_shipping(lines, config.FREE_SHIPPING_MIN_TOTAL, config.FIXED_SHIPPING_FEE)

def to_shipping_options(quote: ShippingQuote, currency: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Un seul tarif fixe issu du moteur d'envoi.
    - Envoi sur devis: aucun tarif (le coût est convenu hors paiement).
    """
    if quote.has_custom_shipping:
        return []
    amount = to_unit_amount(quote.shipping_cost)
    return [{
        "shipping_rate_data": {
            "type": "fixed_amount",
            "display_name": "Livraison standard (GRATUITE)" if amount == 0 else "Livraison standard",
            "fixed_amount": {"amount": amount, "currency": currency or config.CHECKOUT_CURRENCY},
            "delivery_estimate": {
                "minimum": {"unit": "business_day", "value": 3},
                "maximum": {"unit": "business_day", "value": 7},
            },
        },
    }]

def resolve_discount(coupon_code: Optional[str]) -> Tuple[Dict[str, Any], bool]:
    """
    Coupon validé côté serveur.
    - Code == COUPON_CODE et STRIPE_COUPON_ID configuré => {"discounts": [...]}.
    - Sinon => {"allow_promotion_codes": True} (champ de code promo Stripe).
    Les deux options sont mutuellement exclusives côté Stripe. Pas de minimum de commande.
    Retour: (paramètres, coupon_appliqué)
    """
    code = normalize_code(coupon_code)
    valid = normalize_code(config.COUPON_CODE)
    if code and valid and code == valid and config.STRIPE_COUPON_ID:
        return {"discounts": [{"coupon": config.STRIPE_COUPON_ID}]}, True
    return {"allow_promotion_codes": True}, False

def make_idempotency_key(lines: List[LineItem], coupon_code: Optional[str], base_url: str) -> str:
    """
    Clé déterministe sur tout ce qui alimente les paramètres de la session:
    lignes re-tarifées triées par slug (quantité effective, prix en centimes), coupon normalisé
    et origine de redirection. Stripe refuse une clé réutilisée avec des paramètres différents.
    """
    body = {
        "items": sorted([line.slug, line.quantity, to_unit_amount(line.price)] for line in lines),
        "couponCode": normalize_code(coupon_code),
        "baseUrl": base_url,
    }
    digest = hashlib.sha256(json.dumps(body, sort_keys=True, separators=(",", ":")).encode("utf-8")).hexdigest()
    return f"checkout-{digest[:48]}"

def make_metadata(lines: List[LineItem], coupon_applied: bool, quote: ShippingQuote, idempotency_key: str) -> Dict[str, str]:
    """
    Métadonnées Stripe associées à la session (valeurs chaînes).
    - cart: lignes re-tarifées (quantité effective), JSON tronqué à ~450 chars
      pour respecter la limite Stripe par valeur (500).
    """
    cart_meta = [{"slug": line.slug, "quantity": line.quantity} for line in lines]
    return {
        "source": "web",
        "cart": json.dumps(cart_meta)[:450],
        "coupon": "1" if coupon_applied else "0",
        "freeShipping": str(quote.qualifies_for_free_shipping).lower(),
        "customShipping": str(quote.has_custom_shipping).lower(),
        "idempotencyKey": idempotency_key,
    }
