import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from storefront.errors import RemoteConfigError
from storefront.remote_config import repository as remote_config_repo

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/settings", tags=["Settings API"])

# module storefront.remote_config.views
@router.get("/checkout")
def checkout_settings():
    """
    Constantes utilisées par l'aperçu du panier: seuil de livraison gratuite, frais fixes, coupon.
    - 500 {ok: false, message} si la section `checkout` du document distant est invalide.
    """
    try:
        settings = remote_config_repo.fetch_settings()
    except RemoteConfigError as e:
        logger.error("remote_config invalide: %s", e)
        return JSONResponse({"ok": False, "message": str(e)}, status_code=500)
    return {"ok": True, "settings": settings.model_dump(by_alias=True)}
