"""
Schéma du catalogue produits (JSON hébergé sur stockage objet).
Validation stricte à la frontière d'ingestion: un enregistrement invalide devient une
CatalogRecordError explicite, jamais une valeur par défaut silencieuse.
"""
from typing import Any, Dict, List, Literal, Optional, Tuple
import logging

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from storefront.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)

# module storefront.catalog.schemas
class CatalogItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    slug: str = Field(min_length=1, strict=True)
    name: str = Field(min_length=1, strict=True)
    image: str = ""
    full_price: float = Field(alias="fullPrice", ge=0, strict=True)
    discount_price: Optional[float] = Field(default=None, alias="discountPrice", ge=0, strict=True)
    free_shipping: bool = Field(default=False, alias="freeShipping", strict=True)
    max_qty: Optional[int] = Field(
        default=None,
        ge=0,
        strict=True,
        validation_alias=AliasChoices("maxQty", "stock", "max_qty"),
        serialization_alias="maxQty",
    )
    shipping_type: Literal["standard", "custom"] = Field(default="standard", alias="shippingType")
    category: str = "general"
    featured: bool = False
    description: str = ""

    @property
    def unit_price(self) -> float:
        """Prix facturé: prix remisé s'il est > 0, sinon prix plein."""
        if self.discount_price is not None and self.discount_price > 0:
            return self.discount_price
        return self.full_price


class CatalogRecordError(BaseModel):
    index: int
    slug: Optional[str] = None
    message: str


def parse_catalog(raw: Any) -> Tuple[List[CatalogItem], List[CatalogRecordError]]:
    """
    Valide la réponse brute du catalogue.
    - Réponse non-liste => CatalogUnavailableError (catalogue inutilisable).
    - Enregistrement invalide => CatalogRecordError (exclu du catalogue).
    - Slug en double => seul le premier est conservé.
    """
    if not isinstance(raw, list):
        raise CatalogUnavailableError("Catalogue invalide: une liste de produits est attendue")

    items: List[CatalogItem] = []
    errors: List[CatalogRecordError] = []
    seen: Dict[str, int] = {}
    for index, record in enumerate(raw):
        slug = record.get("slug") if isinstance(record, dict) else None
        try:
            item = CatalogItem.model_validate(record)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) or "record" for err in e.errors())
            errors.append(CatalogRecordError(index=index, slug=slug if isinstance(slug, str) else None, message=f"champs invalides: {fields}"))
            continue
        if item.slug in seen:
            errors.append(CatalogRecordError(index=index, slug=item.slug, message=f"slug en double (déjà à l'index {seen[item.slug]})"))
            continue
        seen[item.slug] = index
        items.append(item)
    return items, errors
