from evoting.database.connection import Store, connect

__all__ = ["Store", "connect"]
