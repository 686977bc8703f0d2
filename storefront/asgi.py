"""
Point d'entrée ASGI: `storefront.asgi:app` pour uvicorn/gunicorn en production.
En local, préférer `python -m storefront`.
"""

from storefront.app import app

__all__ = ["app"]
