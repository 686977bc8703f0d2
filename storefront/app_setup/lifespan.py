"""
Lifespan FastAPI de la boutique.
- Rate limiting du checkout: FastAPILimiter sur Redis (RATE_LIMIT_REDIS_URL), fakeredis en test.
- Préchauffe le cache catalogue pour que le premier checkout ne paie pas le téléchargement.
Variables d'environnement:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: aucun limiteur, aucun préchauffage (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: limiteur sur fakeredis
  - LOCAL_RATE_LIMIT_FALLBACK=1: limiteur en mémoire si Redis est injoignable
  - WARM_CATALOG_ON_STARTUP=0: pas de préchauffage du catalogue
"""
import os
import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi_limiter import FastAPILimiter

from storefront import config
from storefront.catalog import repository as catalog_repo
from storefront.errors import CatalogUnavailableError

logger = logging.getLogger("uvicorn.error")

async def _init_rate_limit(app: FastAPI):
    """Retourne le client Redis utilisé par le limiteur (None si désactivé)."""
    try:
        if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
            from fakeredis import FakeAsyncRedis
            r = FakeAsyncRedis(decode_responses=True)
        else:
            r = aioredis.from_url(
                os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0"),
                encoding="utf-8",
                decode_responses=True,
            )
        await FastAPILimiter.init(r)
    except Exception as e:
        fallback = os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1"
        app.state.rate_limit_enabled = fallback
        logger.warning("Checkout rate limit %s (Redis indisponible: %s)", "en mémoire" if fallback else "désactivé", e)
        return None
    app.state.rate_limit_enabled = True
    logger.info("Checkout rate limit actif (Redis)")
    return r

async def _warm_catalog() -> None:
    try:
        catalog = await run_in_threadpool(catalog_repo.get_catalog_map)
    except CatalogUnavailableError as e:
        # Pas bloquant: le checkout relancera le téléchargement et répondra 503 si besoin
        logger.warning("Catalogue non préchargé (%s): %s", config.PRODUCTS_JSON_URL, e.message)
        return
    logger.info("Catalogue préchargé: %s produits", len(catalog))

@asynccontextmanager
async def lifespan(app: FastAPI):
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        yield
        return

    if not config.STRIPE_SECRET_KEY:
        logger.warning("STRIPE_SECRET_KEY absent: POST /api/checkout répondra 500")

    r = await _init_rate_limit(app)
    if os.getenv("WARM_CATALOG_ON_STARTUP", "1") != "0":
        await _warm_catalog()

    yield

    if r is not None:
        await FastAPILimiter.close()
