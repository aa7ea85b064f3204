from .availability_repository import AvailabilityRepository

__all__ = ["AvailabilityRepository"]
