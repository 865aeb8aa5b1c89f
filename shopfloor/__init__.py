from . import alerts

__all__ = ["alerts"]
