"""
Accès au catalogue autoritaire (JSON distant).
- fetch_catalog: GET httpx avec une relance en cas d'erreur réseau / 5xx.
- get_catalog_map: {slug: CatalogItem} avec cache processus de courte durée (CATALOG_CACHE_TTL).
Le cache est partagé entre requêtes concurrentes; la fraîcheur est bornée par le TTL.
"""
from typing import Any, Dict, List, Optional
import logging
import threading
import time

import httpx
from tenacity import before_sleep_log, retry, retry_if_exception, stop_after_attempt, wait_exponential

from storefront import config
from storefront.errors import CatalogUnavailableError
from .schemas import CatalogItem, parse_catalog

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_cache: Dict[str, Any] = {"at": 0.0, "items": None}

MAX_ATTEMPTS = 2

# module storefront.catalog.repository
def _is_transient(exc: BaseException) -> bool:
    """Erreur réseau ou 5xx: relançable. 4xx et JSON illisible: définitifs."""
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500

@retry(
    retry=retry_if_exception(_is_transient),
    stop=stop_after_attempt(MAX_ATTEMPTS),
    wait=wait_exponential(multiplier=0.2, max=1),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
def _get_json(url: str) -> Any:
    resp = httpx.get(url, timeout=config.HTTP_TIMEOUT, headers={"Accept": "application/json"})
    resp.raise_for_status()
    return resp.json()

def fetch_catalog(url: Optional[str] = None) -> List[CatalogItem]:
    """
    Télécharge et valide le catalogue.
    - Erreur transitoire (réseau, 5xx): une seconde tentative, puis CatalogUnavailableError.
    - Erreur 4xx ou JSON illisible: CatalogUnavailableError sans relance.
    - Les enregistrements invalides sont journalisés et exclus.
    """
    url = url or config.PRODUCTS_JSON_URL
    try:
        raw = _get_json(url)
    except (httpx.HTTPError, ValueError) as e:
        logger.error("catalog.fetch_catalog indisponible url=%s: %s", url, e)
        raise CatalogUnavailableError() from e

    items, errors = parse_catalog(raw)
    for err in errors:
        logger.warning("catalog: enregistrement %s (slug=%s) ignoré: %s", err.index, err.slug, err.message)
    return items

def get_catalog_map(force_refresh: bool = False) -> Dict[str, CatalogItem]:
    """Retourne {slug: CatalogItem}, depuis le cache si encore frais."""
    now = time.monotonic()
    with _lock:
        cached = _cache["items"]
        if not force_refresh and cached is not None and now - _cache["at"] < config.CATALOG_CACHE_TTL:
            return cached
    items = fetch_catalog()
    catalog = {item.slug: item for item in items}
    with _lock:
        _cache["items"] = catalog
        _cache["at"] = time.monotonic()
    return catalog

def get_product(slug: str) -> Optional[CatalogItem]:
    return get_catalog_map().get(slug)

def invalidate_cache() -> None:
    with _lock:
        _cache["items"] = None
        _cache["at"] = 0.0
