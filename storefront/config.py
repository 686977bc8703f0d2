# storefront.config
from pathlib import Path
import logging
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale de la boutique.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets Stripe, le coupon et les règles d'envoi
- Expose les URLs des sources externes (catalogue, configuration marketing)
- Fournit l'origine canonique et la liste blanche des domaines de la boutique
"""

logger = logging.getLogger(__name__)

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _env_number(name: str, default: float) -> float:
    """Lit un nombre depuis l'environnement; valeur invalide => défaut (avec warning)."""
    raw = _clean_env(os.getenv(name) or "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("config: %s invalide (%r), utilisation de %s", name, raw, default)
        return default

def _env_list(name: str, default: str) -> list:
    return [x.strip().rstrip("/") for x in (os.getenv(name) or default).split(",") if x.strip()]

# Stripe: clés publiques/privées, secret webhook et coupon côté passerelle
STRIPE_PUBLIC_KEY = _clean_env(os.getenv("STRIPE_PUBLIC_KEY") or "")
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")
STRIPE_COUPON_ID = _clean_env(os.getenv("STRIPE_COUPON_ID") or "")

# Coupon: code accepté et pourcentage (aperçu client + validation serveur)
COUPON_CODE = _clean_env(os.getenv("COUPON_CODE") or "")
COUPON_PERCENT = _env_number("COUPON_PERCENT", 0)

# Règles d'envoi (montants dans la devise de la boutique)
FREE_SHIPPING_MIN_TOTAL = _env_number("FREE_SHIPPING_MIN_TOTAL", 499)
FIXED_SHIPPING_FEE = _env_number("FIXED_SHIPPING_FEE", 149)
CHECKOUT_CURRENCY = _clean_env(os.getenv("CHECKOUT_CURRENCY") or "mxn").lower()
SHIPPING_COUNTRIES = [c.upper() for c in _env_list("SHIPPING_COUNTRIES", "MX")]

# Quantité max par ligne quand le catalogue ne donne pas de stock
DEFAULT_MAX_QTY = int(_env_number("DEFAULT_MAX_QTY", 10))

# Sources externes (JSON hébergé sur stockage objet)
PRODUCTS_JSON_URL = _clean_env(os.getenv("PRODUCTS_JSON_URL") or "https://assets.example.com/products.json")
CONFIG_JSON_URL = _clean_env(os.getenv("CONFIG_JSON_URL") or "")
CATALOG_CACHE_TTL = _env_number("CATALOG_CACHE_TTL", 60)
REMOTE_CONFIG_CACHE_TTL = _env_number("REMOTE_CONFIG_CACHE_TTL", 30 * 60)
HTTP_TIMEOUT = _env_number("HTTP_TIMEOUT", 10)

# Origine canonique + liste blanche des domaines autorisés pour les redirections
SITE_URL = _clean_env(os.getenv("SITE_URL") or "http://localhost:3000").rstrip("/")
ALLOWED_ORIGINS = _env_list("ALLOWED_ORIGINS", "http://localhost:3000")

# Pages de succès/annulation du checkout
CHECKOUT_SUCCESS_PATH = os.getenv("CHECKOUT_SUCCESS_PATH", "/success")
CHECKOUT_CANCEL_PATH = os.getenv("CHECKOUT_CANCEL_PATH", "/cart")

# CORS / hôtes
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
