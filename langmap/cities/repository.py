from langmap.store.gateway import StoreGateway


class CityRepository:
    def __init__(self, gateway: StoreGateway) -> None:
        self._gateway = gateway

    async def get_by_slug(self, slug: str) -> dict | None:
        rows = await self._gateway.query("cities", {"slug": slug})
        if not rows:
            return None
        return rows[0]

    async def get_id_by_slug(self, slug: str) -> str | None:
        city = await self.get_by_slug(slug)
        if city is None:
            return None
        return city["id"]
