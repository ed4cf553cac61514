"""
Erreurs métier levées par les services.

Elles héritent de ValueError : les routers les traduisent en codes HTTP
(400 pour une entrée invalide, 404 pour une ressource introuvable).
"""


class InvalidInputError(ValueError):
    """Soumission rejetée localement (lot vide, mois invalide...)."""


class NotFoundError(ValueError):
    """Utilisateur absent du répertoire du personnel ou établissement sans effectif."""
