from bookfinder.db.models.core import StoredValue

__all__ = ["StoredValue"]
