"""
API routes package initialization.

This package contains all API route modules organized by resource.
"""

from . import (
    auth,
    chambres,
    chat,
    health,
    medicales,
    offres,
    paiements,
    pelerins,
    pelerins_paiement,
    users,
    versements,
    vols,
    voyages,
)

__all__ = [
    "auth",
    "chambres",
    "chat",
    "health",
    "medicales",
    "offres",
    "paiements",
    "pelerins",
    "pelerins_paiement",
    "users",
    "versements",
    "vols",
    "voyages",
]
