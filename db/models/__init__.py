# Import all models to ensure they are registered with the database
from .kv_entry import KeyValueEntry

__all__ = ["KeyValueEntry"]
