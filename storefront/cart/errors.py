"""Erreurs côté client du panier."""

# module storefront.cart.errors
class StaleCartItemError(Exception):
    """Une ligne d'un ancien format (sans slug) empêche le checkout."""

    def __init__(self, name: str = ""):
        self.name = name
        label = f"« {name} »" if name else "Un produit"
        super().__init__(
            f"{label} de votre panier provient d'une ancienne version. "
            "Retirez-le puis ajoutez-le de nouveau."
        )


class CheckoutClientError(Exception):
    """Le serveur a refusé de créer la session de paiement ({ok: false, message})."""

    def __init__(self, message: str, status_code: int = 0):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
