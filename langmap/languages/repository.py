from datetime import UTC, datetime
from uuid import uuid4

from langmap.store.gateway import StoreGateway


def _now() -> str:
    return datetime.now(UTC).isoformat()


class LanguageRepository:
    def __init__(self, gateway: StoreGateway) -> None:
        self._gateway = gateway

    async def get_by_id(self, language_id: str) -> dict | None:
        rows = await self._gateway.query("languages", {"id": language_id})
        if not rows:
            return None
        return rows[0]

    async def find_by_name(self, city_id: str, name: str, locale: str) -> dict | None:
        """Return the city's language whose `locale` translation is exactly `name`."""
        translations = await self._gateway.query(
            "language_translations",
            {"name": name, "locale_code": locale},
            columns=["language_id"],
        )
        for translation in translations:
            rows = await self._gateway.query(
                "languages", {"id": translation["language_id"], "city_id": city_id}
            )
            if rows:
                return rows[0]
        return None

    async def create(self, city_id: str, endonym: str | None, iso_code: str | None) -> dict:
        now = _now()
        return await self._gateway.insert(
            "languages",
            {
                "id": str(uuid4()),
                "city_id": city_id,
                "endonym": endonym,
                "iso_639_3_code": iso_code,
                "created_at": now,
                "updated_at": now,
            },
        )

    async def update(self, language_id: str, endonym: str | None, iso_code: str | None) -> int:
        return await self._gateway.update(
            "languages",
            {"id": language_id},
            {"endonym": endonym, "iso_639_3_code": iso_code, "updated_at": _now()},
        )

    async def delete(self, language_id: str) -> int:
        return await self._gateway.delete("languages", {"id": language_id})

    async def create_translation(self, language_id: str, locale: str, name: str) -> dict:
        now = _now()
        return await self._gateway.insert(
            "language_translations",
            {
                "id": str(uuid4()),
                "language_id": language_id,
                "locale_code": locale,
                "name": name,
                "created_at": now,
                "updated_at": now,
            },
        )

    async def update_translation(self, language_id: str, locale: str, name: str) -> int:
        return await self._gateway.update(
            "language_translations",
            {"language_id": language_id, "locale_code": locale},
            {"name": name, "updated_at": _now()},
        )

    async def get_translations(self, language_id: str) -> list[dict]:
        return await self._gateway.query(
            "language_translations", {"language_id": language_id}, order_by="locale_code"
        )

    async def get_taxonomy_value_ids(self, language_id: str) -> list[str]:
        rows = await self._gateway.query(
            "language_taxonomies",
            {"language_id": language_id},
            columns=["taxonomy_value_id"],
            order_by="taxonomy_value_id",
        )
        return [row["taxonomy_value_id"] for row in rows]

    async def replace_taxonomies(self, language_id: str, value_ids: list[str]) -> None:
        """Delete every assignment of the language, then insert `value_ids` in one batch.

        Raises StoreError from whichever step fails; a failed delete means
        nothing is inserted.
        """
        await self._gateway.delete("language_taxonomies", {"language_id": language_id})
        if not value_ids:
            return

        now = _now()
        await self._gateway.insert_many(
            "language_taxonomies",
            [
                {"language_id": language_id, "taxonomy_value_id": value_id, "created_at": now}
                for value_id in value_ids
            ],
        )

    async def list_for_city(self, city_id: str, locale: str) -> list[dict]:
        languages = await self._gateway.query("languages", {"city_id": city_id})
        if not languages:
            return []

        language_ids = {language["id"] for language in languages}
        translations = await self._gateway.query(
            "language_translations",
            {"locale_code": locale},
            columns=["language_id", "name"],
        )
        names = {
            row["language_id"]: row["name"]
            for row in translations
            if row["language_id"] in language_ids
        }

        return [
            {
                "id": language["id"],
                "name": names.get(language["id"]),
                "endonym": language["endonym"],
                "iso_639_3_code": language["iso_639_3_code"],
            }
            for language in languages
        ]
