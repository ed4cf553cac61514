"""
Fenêtres temporelles UTC utilisées par les synthèses et les feuilles de temps.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from app.exceptions import InvalidInputError


def month_window(year: int, month: int) -> Tuple[datetime, datetime]:
    """Retourne [1er du mois, 1er du mois suivant) en UTC."""
    if not 1 <= month <= 12:
        raise InvalidInputError(f"Mois invalide : {month}. Valeurs acceptées : 1 à 12.")
    if not 1 <= year <= 9998:
        raise InvalidInputError(f"Année invalide : {year}.")

    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


def day_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Retourne [minuit UTC, minuit UTC du lendemain) pour le jour courant."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    start = datetime(now.year, now.month, now.day, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)
