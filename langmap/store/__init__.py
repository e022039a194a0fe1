from langmap.store.gateway import SQLiteGateway, StoreGateway

__all__ = ["SQLiteGateway", "StoreGateway"]
