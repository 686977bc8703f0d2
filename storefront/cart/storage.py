"""
Ports de persistance du panier (stockage durable côté client).
- load(): liste brute des lignes persistées, ou None si rien.
- save(items): remplace le contenu persisté.
- clear(): supprime le contenu persisté.
Les erreurs d'E/S remontent: c'est le CartStore qui décide de les ignorer.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

STORAGE_KEY = "cart"

# module storefront.cart.storage
class CartStorage(Protocol):
    def load(self) -> Optional[List[Dict[str, Any]]]: ...
    def save(self, items: List[Dict[str, Any]]) -> None: ...
    def clear(self) -> None: ...


class MemoryCartStorage:
    """Stockage en mémoire (tests, rendu serveur sans navigateur)."""

    def __init__(self, initial: Optional[List[Dict[str, Any]]] = None):
        self._data: Dict[str, str] = {}
        if initial is not None:
            self._data[STORAGE_KEY] = json.dumps(initial)

    def load(self) -> Optional[List[Dict[str, Any]]]:
        raw = self._data.get(STORAGE_KEY)
        return json.loads(raw) if raw else None

    def save(self, items: List[Dict[str, Any]]) -> None:
        self._data[STORAGE_KEY] = json.dumps(items)

    def clear(self) -> None:
        self._data.pop(STORAGE_KEY, None)


class JsonFileCartStorage:
    """
    Stockage dans un fichier JSON {"cart": [...]}.
    - Équivalent du localStorage navigateur pour un client Python (kiosque, CLI).
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> Optional[List[Dict[str, Any]]]:
        if not self.path.exists():
            return None
        with self.path.open("r", encoding="utf-8") as f:
            doc = json.load(f)
        return (doc or {}).get(STORAGE_KEY)

    def save(self, items: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump({STORAGE_KEY: items}, f, ensure_ascii=False)
        tmp.replace(self.path)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
