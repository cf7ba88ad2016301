from peewee import Model, SqliteDatabase

from core.settings import settings

# Deferred so tests and the CLI can point at their own file (or ":memory:")
db = SqliteDatabase(None)


class BaseModel(Model):
    class Meta:
        database = db


# Function to initialize database connection
def init_db(database_path: str | None = None):
    """Initialize the local store and create tables if they don't exist."""
    db.init(
        database_path or settings.database_path,
        pragmas={"journal_mode": "wal", "busy_timeout": 5000},
    )
    db.connect(reuse_if_open=True)

    from .models.kv_entry import KeyValueEntry

    # safe=True is idempotent
    db.create_tables([KeyValueEntry], safe=True)


# Function to close database connection
def close_db():
    """Close database connection."""
    if not db.is_closed():
        db.close()
