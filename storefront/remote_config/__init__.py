"""
Module 'remote_config': constantes d'envoi et coupon de l'aperçu client,
lus depuis le document de configuration marketing.
"""

from .schemas import CheckoutSettings, parse_settings
from .repository import fetch_config_document, fetch_settings, invalidate_cache

__all__ = [
    "CheckoutSettings",
    "parse_settings",
    "fetch_config_document",
    "fetch_settings",
    "invalidate_cache",
]
