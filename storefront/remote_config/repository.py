"""
Lecture du document de configuration distant (CONFIG_JSON_URL).
- Paramètre ?v=<tranche de 30 minutes> pour contourner les caches CDN.
- Cache processus (REMOTE_CONFIG_CACHE_TTL).
- Échec réseau: repli sur les valeurs de l'environnement (warning). Schéma invalide: RemoteConfigError.
"""
from typing import Any, Dict, Optional
import logging
import threading
import time

import httpx

from storefront import config
from .schemas import CheckoutSettings, parse_settings

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_cache: Dict[str, Any] = {"at": 0.0, "settings": None}

VERSION_WINDOW_SECONDS = 30 * 60

# module storefront.remote_config.repository
def _version_key(now: Optional[float] = None) -> int:
    return int((now if now is not None else time.time()) // VERSION_WINDOW_SECONDS)

def fetch_config_document(url: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """GET du document JSON; None si aucune URL n'est configurée."""
    url = url or config.CONFIG_JSON_URL
    if not url:
        return None
    resp = httpx.get(url, params={"v": _version_key()}, timeout=config.HTTP_TIMEOUT)
    resp.raise_for_status()
    return resp.json()

def fetch_settings(force_refresh: bool = False) -> CheckoutSettings:
    now = time.monotonic()
    with _lock:
        cached = _cache["settings"]
        if not force_refresh and cached is not None and now - _cache["at"] < config.REMOTE_CONFIG_CACHE_TTL:
            return cached
    try:
        doc = fetch_config_document()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("remote_config: document indisponible, valeurs par défaut utilisées: %s", e)
        # Pas de mise en cache du repli: nouvel essai au prochain appel
        return CheckoutSettings()
    settings = parse_settings(doc)
    with _lock:
        _cache["settings"] = settings
        _cache["at"] = time.monotonic()
    return settings

def invalidate_cache() -> None:
    with _lock:
        _cache["settings"] = None
        _cache["at"] = 0.0
