"""
Règle de plafonnement des quantités par le stock (logique pure).
"""
import math
from typing import Any, Optional

# module storefront.cart.stock
def _to_number(value: Any) -> float:
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0.0
    return n if math.isfinite(n) else 0.0

def normalize_stock(max_stock: Any) -> Optional[int]:
    """
    Normalise un stock maximum: entier >= 0, ou None si absent / non fini.
    - Les booléens ne sont pas des stocks (None).
    """
    if max_stock is None or isinstance(max_stock, bool):
        return None
    try:
        n = float(max_stock)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(n):
        return None
    return max(0, math.floor(n))

def clamp_to_stock(requested_qty: Any, max_stock: Any = None) -> int:
    """
    Borne une quantité demandée par le stock connu.
    - requested_qty: nombre ou chaîne; non fini / négatif / illisible => 0.
    - max_stock: si défini et fini, résultat = min(floor(qty), floor(max_stock)).
    - Jamais d'erreur: retourne toujours un entier >= 0. L'appelant retire les lignes à 0.
    """
    q = max(0, math.floor(max(0.0, _to_number(requested_qty))))
    cap = normalize_stock(max_stock)
    if cap is None:
        return q
    return min(q, cap)
