import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from storefront.catalog import repository as catalog_repo
from storefront.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/products", tags=["Catalog API"])

# module storefront.catalog.views
@router.get("")
def list_products():
    """
    Liste les produits validés du catalogue (mêmes données que celles utilisées au checkout).
    - 503 {ok: false, message} si le catalogue est indisponible.
    """
    try:
        catalog = catalog_repo.get_catalog_map()
    except CatalogUnavailableError as e:
        return JSONResponse({"ok": False, "message": e.message}, status_code=e.status_code)
    return {"ok": True, "products": [item.model_dump(by_alias=True) for item in catalog.values()]}

@router.get("/{slug}")
def get_product(slug: str):
    try:
        item = catalog_repo.get_product(slug)
    except CatalogUnavailableError as e:
        return JSONResponse({"ok": False, "message": e.message}, status_code=e.status_code)
    if item is None:
        return JSONResponse({"ok": False, "message": f"Produit introuvable : {slug}"}, status_code=404)
    return {"ok": True, "product": item.model_dump(by_alias=True)}
