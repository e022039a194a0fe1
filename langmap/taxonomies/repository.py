from langmap.store.gateway import StoreGateway


class TaxonomyRepository:
    def __init__(self, gateway: StoreGateway) -> None:
        self._gateway = gateway

    async def list_types(self, city_id: str) -> list[dict]:
        return await self._gateway.query(
            "taxonomy_types", {"city_id": city_id}, columns=["id", "slug"], order_by="slug"
        )

    async def list_values(self, taxonomy_type_id: str) -> list[dict]:
        return await self._gateway.query(
            "taxonomy_values",
            {"taxonomy_type_id": taxonomy_type_id},
            columns=["id", "slug"],
            order_by="slug",
        )

    async def get_type_name(self, taxonomy_type_id: str, locale: str) -> str | None:
        rows = await self._gateway.query(
            "taxonomy_type_translations",
            {"taxonomy_type_id": taxonomy_type_id, "locale_code": locale},
            columns=["name"],
        )
        return rows[0]["name"] if rows else None

    async def get_value_name(self, taxonomy_value_id: str, locale: str) -> str | None:
        rows = await self._gateway.query(
            "taxonomy_value_translations",
            {"taxonomy_value_id": taxonomy_value_id, "locale_code": locale},
            columns=["name"],
        )
        return rows[0]["name"] if rows else None
