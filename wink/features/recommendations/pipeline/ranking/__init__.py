from .service import rank

__all__ = ["rank"]
