"""
Lance l'API de la boutique (checkout Stripe, catalogue, réglages) avec uvicorn.

Usage:
    python -m storefront

Variables d'environnement lues ici:
- PORT (8000 par défaut), HOST (0.0.0.0)
- UVICORN_RELOAD: "1"/"true"/"yes" pour le rechargement auto en local
- LOG_LEVEL: niveau de logs uvicorn et de l'application
Le reste de la configuration (Stripe, catalogue, envoi) est lu par storefront.config.
"""
import os

import uvicorn

def main() -> None:
    reload_flag = os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes")
    uvicorn.run(
        "storefront.asgi:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", 8000)),
        reload=reload_flag,
        log_level=os.environ.get("LOG_LEVEL", "info").lower(),
        proxy_headers=True,
    )

if __name__ == "__main__":
    main()
