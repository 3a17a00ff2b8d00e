from .health import HealthService
from .resources import ResourceService

__all__ = ["HealthService", "ResourceService"]
