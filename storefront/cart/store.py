"""
Store du panier: collection ordonnée de lignes, mutations synchrones, persistance après chaque mutation.
- Les agrégats (nombre d'articles, sous-total, envoi) sont recalculés à la lecture: jamais périmés.
- La persistance est best-effort: une erreur de stockage est journalisée, l'état en mémoire reste valide.
- Les observateurs (subscribe) sont notifiés après chaque changement d'état.
"""
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import parse_qs, urlsplit
import logging

from storefront import config
from .errors import StaleCartItemError
from .models import CheckoutLine, LineItem
from .shipping import ShippingQuote, compute_shipping
from .stock import clamp_to_stock
from .storage import CartStorage, MemoryCartStorage

logger = logging.getLogger(__name__)

SUCCESS_PATH = "/success"
SESSION_PARAM = "session_id"

Listener = Callable[["CartStore"], None]

# module storefront.cart.store
class CartStore:
    def __init__(
        self,
        storage: Optional[CartStorage] = None,
        free_shipping_min_total: Optional[float] = None,
        fixed_shipping_fee: Optional[float] = None,
    ):
        self.storage: CartStorage = storage if storage is not None else MemoryCartStorage()
        self.free_shipping_min_total = (
            config.FREE_SHIPPING_MIN_TOTAL if free_shipping_min_total is None else free_shipping_min_total
        )
        self.fixed_shipping_fee = config.FIXED_SHIPPING_FEE if fixed_shipping_fee is None else fixed_shipping_fee
        self.is_open = False
        self._items: List[LineItem] = []
        self._listeners: List[Listener] = []
        self._hydrate()

    @classmethod
    def from_settings(cls, settings: Any, storage: Optional[CartStorage] = None) -> "CartStore":
        """Store configuré avec les constantes d'envoi de la configuration distante (CheckoutSettings)."""
        return cls(
            storage=storage,
            free_shipping_min_total=settings.free_shipping_min_total,
            fixed_shipping_fee=settings.fixed_shipping_fee,
        )

    # ---- lecture
    @property
    def items(self) -> List[LineItem]:
        return list(self._items)

    @property
    def count(self) -> int:
        return sum(i.quantity for i in self._items)

    @property
    def subtotal(self) -> float:
        return sum(i.price * i.quantity for i in self._items)

    @property
    def shipping(self) -> ShippingQuote:
        return compute_shipping(self._items, self.free_shipping_min_total, self.fixed_shipping_fee)

    def get(self, key: str) -> Optional[LineItem]:
        return next((i for i in self._items if i.key == key), None)

    def __len__(self) -> int:
        return len(self._items)

    # ---- observateurs
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Enregistre un observateur; retourne la fonction de désinscription."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return _unsubscribe

    # ---- visibilité du mini-panier
    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def toggle(self) -> None:
        self.is_open = not self.is_open

    # ---- mutations
    def add(self, item: LineItem | Dict[str, Any]) -> bool:
        """
        Ajoute un produit (ou +1 s'il est déjà présent), plafonné par le stock.
        - Déjà au plafond: no-op. Stock à 0: ajout rejeté silencieusement.
        - Ouvre toujours le mini-panier.
        Retourne True si le panier a changé.
        """
        line = item if isinstance(item, LineItem) else LineItem.model_validate(item)
        changed = False
        existing = self.get(line.key)
        if existing is not None:
            next_qty = clamp_to_stock(existing.quantity + 1, existing.max_stock)
            if next_qty != existing.quantity:
                self._replace(existing.key, existing.with_quantity(next_qty))
                changed = True
        else:
            qty = clamp_to_stock(1, line.max_stock)
            if qty > 0:
                self._items.append(line.with_quantity(qty))
                changed = True
        self.is_open = True
        if changed:
            self._commit()
        return changed

    def remove(self, key: str) -> bool:
        before = len(self._items)
        self._items = [i for i in self._items if i.key != key]
        if len(self._items) == before:
            return False
        self._commit()
        return True

    def increment(self, key: str) -> bool:
        existing = self.get(key)
        if existing is None:
            return False
        return self._set(existing, clamp_to_stock(existing.quantity + 1, existing.max_stock))

    def decrement(self, key: str) -> bool:
        existing = self.get(key)
        if existing is None:
            return False
        return self._set(existing, max(0, existing.quantity - 1))

    def set_quantity(self, key: str, quantity: Any) -> bool:
        existing = self.get(key)
        if existing is None:
            return False
        return self._set(existing, clamp_to_stock(quantity, existing.max_stock))

    def clear(self) -> None:
        self._items = []
        self._notify()
        try:
            self.storage.clear()
        except Exception:
            logger.warning("cart.store: échec de suppression du stockage", exc_info=True)

    def handle_navigation(self, url: str) -> bool:
        """
        Vidage automatique après paiement confirmé.
        - Uniquement sur la route /success ET avec un paramètre session_id non vide.
        - Ferme le mini-panier. Retourne True si le vidage a eu lieu.
        """
        parts = urlsplit(url or "")
        path = parts.path.rstrip("/") or "/"
        session_ids = [v for v in parse_qs(parts.query).get(SESSION_PARAM, []) if v.strip()]
        if path != SUCCESS_PATH or not session_ids:
            return False
        logger.info("cart.store: paiement confirmé (session=%s), panier vidé", session_ids[0])
        self.clear()
        self.is_open = False
        return True

    def checkout_items(self) -> List[CheckoutLine]:
        """Lignes envoyées au serveur (slug + quantité). Lève StaleCartItemError si une ligne n'a pas de slug."""
        stale = next((i for i in self._items if i.is_stale), None)
        if stale is not None:
            raise StaleCartItemError(stale.name)
        return [CheckoutLine(slug=i.slug, quantity=i.quantity) for i in self._items]

    # ---- interne
    def _set(self, existing: LineItem, next_qty: int) -> bool:
        if next_qty == existing.quantity:
            return False
        if next_qty <= 0:
            self._items = [i for i in self._items if i.key != existing.key]
        else:
            self._replace(existing.key, existing.with_quantity(next_qty))
        self._commit()
        return True

    def _replace(self, key: str, line: LineItem) -> None:
        self._items = [line if i.key == key else i for i in self._items]

    def _commit(self) -> None:
        self._notify()
        self._persist()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _persist(self) -> None:
        try:
            self.storage.save([i.to_storage() for i in self._items])
        except Exception:
            logger.warning("cart.store: échec de persistance du panier", exc_info=True)

    def _hydrate(self) -> None:
        """Recharge le panier persisté; chaque ligne est revalidée contre son propre stock."""
        try:
            raw = self.storage.load() or []
        except Exception:
            logger.warning("cart.store: panier persisté illisible, démarrage à vide", exc_info=True)
            return
        seen = set()
        for record in raw if isinstance(raw, list) else []:
            if not isinstance(record, dict):
                continue
            try:
                line = LineItem.from_storage(record)
            except ValueError:
                logger.warning("cart.store: ligne persistée invalide ignorée: %s", record)
                continue
            if line is None or line.key in seen:
                continue
            seen.add(line.key)
            self._items.append(line)
