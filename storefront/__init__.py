"""Boutique en ligne: panier, catalogue et checkout Stripe."""
