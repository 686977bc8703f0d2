"""
Taxonomie des erreurs côté serveur.
- Chaque erreur porte un status_code HTTP et un message destiné au client ({ok: false, message}).
- Configuration (500): non relançable. Validation (400): nomme l'entrée fautive.
- Catalogue indisponible (503) après une relance. Passerelle (502): message Stripe tel quel.
"""

# module storefront.errors
class CheckoutError(Exception):
    status_code = 500
    default_message = "Erreur lors du checkout"

    def __init__(self, message: str = "", status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class CheckoutConfigurationError(CheckoutError):
    status_code = 500
    default_message = "Le paiement n'est pas configuré sur le serveur"


class InvalidCartError(CheckoutError):
    status_code = 400
    default_message = "Panier vide"


class UnknownProductError(InvalidCartError):
    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Produit invalide : {slug}")


class CatalogUnavailableError(CheckoutError):
    status_code = 503
    default_message = "Catalogue indisponible, réessayez dans un instant"


class GatewayError(CheckoutError):
    status_code = 502
    default_message = "Erreur de la passerelle de paiement"


class RemoteConfigError(Exception):
    """Le document de configuration distant ne respecte pas le schéma attendu."""
