"""
Module 'catalog': source de vérité des prix, stocks et classes d'envoi.
"""

from .schemas import CatalogItem, CatalogRecordError, parse_catalog
from .repository import fetch_catalog, get_catalog_map, get_product, invalidate_cache

__all__ = [
    "CatalogItem",
    "CatalogRecordError",
    "parse_catalog",
    "fetch_catalog",
    "get_catalog_map",
    "get_product",
    "invalidate_cache",
]
