from . import dispatcher

__all__ = ["dispatcher"]
