# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant la création du schéma et le chargement des routers.

from app.models.user import User  # noqa: F401
from app.models.staff import Staff  # noqa: F401
from app.models.attendance import AttendanceLog  # noqa: F401
from app.models.device_health import DeviceHealth  # noqa: F401
