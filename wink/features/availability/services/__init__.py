from .availability_service import AvailabilityService

__all__ = ["AvailabilityService"]
