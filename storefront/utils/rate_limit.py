"""
Limitation de débit de l'API checkout.
Pas de compte client sur la boutique: la clé est l'IP (première valeur de X-Forwarded-For
derrière le proxy) + le chemin.
"""
from typing import Any, Dict
from fastapi import Request, Response, HTTPException
import os
import time

TOO_MANY_REQUESTS = "Trop de requêtes, réessayez dans un instant"

# module storefront.utils.rate_limit
def _client_key(req: Request) -> str:
    forwarded = (req.headers.get("x-forwarded-for") or "").split(",")[0].strip()
    ip = forwarded or (req.client.host if req.client else "local")
    return f"ip:{ip}:{req.url.path}"

def _local_window_exceeded(request: Request, times: int, seconds: int) -> bool:
    """Fenêtre glissante en mémoire (par process), rangée dans app.state."""
    now = time.time()
    key = _client_key(request)
    windows = getattr(request.app.state, "_rl_store", None)
    if windows is None:
        windows = request.app.state._rl_store = {}
    hits = [t for t in windows.get(key, []) if now - t < seconds]
    if len(hits) >= times:
        windows[key] = hits
        return True
    hits.append(now)
    windows[key] = hits
    return False

def optional_rate_limit(times: int, seconds: int):
    """
    Dépendance FastAPI de limitation de débit.
    - LOCAL_RATE_LIMIT_FALLBACK=1: fenêtre glissante en mémoire (dev/tests).
    - app.state.rate_limit_enabled False: aucune limite.
    - Sinon fastapi-limiter (Redis); une panne du limiteur ne bloque jamais le checkout.
    """
    async def _dep(request: Request, response: Response):
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            if _local_window_exceeded(request, times, seconds):
                raise HTTPException(status_code=429, detail=TOO_MANY_REQUESTS)
            return

        if getattr(request.app.state, "rate_limit_enabled", None) is False:
            return

        try:
            from fastapi_limiter.depends import RateLimiter

            async def _identifier(req: Request) -> str:
                return _client_key(req)
            await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, response)
        except HTTPException:
            raise
        except Exception:
            return
    return _dep

def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    """État du limiteur pour /health/rate-limit (jamais l'URL Redis complète)."""
    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    try:
        from fastapi_limiter import FastAPILimiter
        ready = getattr(FastAPILimiter, "redis", None) is not None
    except ImportError:
        ready = False

    info: Dict[str, Any] = {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": ready,
        "backend": "redis" if ready else None,
        "fallback": os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1",
    }

    redis_url = os.getenv("RATE_LIMIT_REDIS_URL")
    if ready and redis_url:
        from urllib.parse import urlparse
        p = urlparse(redis_url)
        info["redis"] = {"scheme": p.scheme, "host": p.hostname, "port": p.port}
    return info
