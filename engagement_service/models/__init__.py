from engagement_service.models.base import Base
from engagement_service.models.models import EngagementLog, View

__all__ = ["Base", "EngagementLog", "View"]
