import asyncio

import pytest

from langmap.cities.repository import CityRepository
from langmap.exceptions import StoreError
from langmap.languages.importers.schemas import ImportConfig, ImportRow, TaxonomyMapping
from langmap.languages.importers.service import ImportService
from langmap.languages.importers.worker import RowImporter
from langmap.languages.repository import LanguageRepository
from langmap.listing_cache import ListingCache
from langmap.store.gateway import SQLiteGateway
from tests.conftest import CITY_ID, CITY_SLUG


async def _seed_taxonomy(gateway) -> None:
    await gateway.insert("taxonomy_types", {"id": "type-region", "city_id": CITY_ID, "slug": "region"})
    await gateway.insert_many(
        "taxonomy_values",
        [
            {"id": "value-europe", "taxonomy_type_id": "type-region", "slug": "europe"},
            {"id": "value-asia", "taxonomy_type_id": "type-region", "slug": "asia"},
        ],
    )


async def test_query_filters_and_orders(sqlite_gateway):
    await sqlite_gateway.insert_many(
        "cities",
        [
            {"id": "city-paris", "slug": "paris", "name": "Paris"},
            {"id": "city-austin", "slug": "austin", "name": "Austin"},
        ],
    )

    rows = await sqlite_gateway.query("cities", columns=["slug"], order_by="slug")
    assert [row["slug"] for row in rows] == ["austin", "berlin", "paris"]

    rows = await sqlite_gateway.query("cities", columns=["slug"], order_by="-slug")
    assert [row["slug"] for row in rows] == ["paris", "berlin", "austin"]

    [paris] = await sqlite_gateway.query("cities", {"slug": "paris"})
    assert paris["id"] == "city-paris"
    assert paris["name"] == "Paris"


async def test_query_none_filter_matches_null(sqlite_gateway):
    await sqlite_gateway.insert("languages", {"id": "lang-1", "city_id": CITY_ID, "endonym": None})
    await sqlite_gateway.insert("languages", {"id": "lang-2", "city_id": CITY_ID, "endonym": "Deutsch"})

    rows = await sqlite_gateway.query("languages", {"endonym": None}, columns=["id"])

    assert rows == [{"id": "lang-1"}]


async def test_update_and_delete_report_affected_rows(sqlite_gateway):
    await sqlite_gateway.insert("languages", {"id": "lang-1", "city_id": CITY_ID})

    assert await sqlite_gateway.update("languages", {"id": "lang-1"}, {"endonym": "Türkçe"}) == 1
    assert await sqlite_gateway.update("languages", {"id": "missing"}, {"endonym": "x"}) == 0

    [language] = await sqlite_gateway.query("languages", {"id": "lang-1"})
    assert language["endonym"] == "Türkçe"

    assert await sqlite_gateway.delete("languages", {"id": "lang-1"}) == 1
    assert await sqlite_gateway.query("languages", {"id": "lang-1"}) == []


async def test_values_are_bound_as_parameters(sqlite_gateway):
    hostile = "x'); DROP TABLE cities; --"
    await sqlite_gateway.insert("cities", {"id": "city-x", "slug": hostile, "name": hostile})

    [city] = await sqlite_gateway.query("cities", {"slug": hostile})
    assert city["name"] == hostile
    assert len(await sqlite_gateway.query("cities")) == 2


@pytest.mark.parametrize(
    "call",
    [
        lambda gw: gw.query("users"),
        lambda gw: gw.query("cities", {"password": "x"}),
        lambda gw: gw.query("cities", columns=["slug", "secret"]),
        lambda gw: gw.query("cities", order_by="slug; DROP TABLE cities"),
        lambda gw: gw.insert("cities", {"id": "c", "slug": "s", "name": "n", "evil": 1}),
        lambda gw: gw.update("cities", {"id": CITY_ID}, {"nope": 1}),
    ],
)
async def test_unknown_identifiers_are_rejected(sqlite_gateway, call):
    with pytest.raises(StoreError):
        await call(sqlite_gateway)


async def test_update_and_delete_require_filters(sqlite_gateway):
    with pytest.raises(StoreError, match="without filters"):
        await sqlite_gateway.update("cities", {}, {"name": "Everywhere"})
    with pytest.raises(StoreError, match="without filters"):
        await sqlite_gateway.delete("cities", {})

    assert len(await sqlite_gateway.query("cities")) == 1


async def test_constraint_violation_raises_store_error(sqlite_gateway):
    with pytest.raises(StoreError) as exc_info:
        await sqlite_gateway.insert("cities", {"id": "city-dup", "slug": CITY_SLUG, "name": "Dup"})

    assert exc_info.value.table == "cities"
    assert exc_info.value.code == "STORE_ERROR"
    assert "UNIQUE" in exc_info.value.message


async def test_insert_many_is_all_or_nothing(sqlite_gateway):
    with pytest.raises(StoreError):
        await sqlite_gateway.insert_many(
            "cities",
            [
                {"id": "city-a", "slug": "a", "name": "A"},
                {"id": "city-b", "slug": CITY_SLUG, "name": "B"},
            ],
        )

    assert await sqlite_gateway.query("cities", {"slug": "a"}) == []


async def test_insert_many_requires_uniform_columns(sqlite_gateway):
    with pytest.raises(StoreError, match="same columns"):
        await sqlite_gateway.insert_many(
            "cities",
            [{"id": "a", "slug": "a", "name": "A"}, {"id": "b", "slug": "b"}],
        )


async def test_failed_write_keeps_concurrent_writes(db, sqlite_gateway):
    lock = asyncio.Lock()
    failing_repo = LanguageRepository(SQLiteGateway(db, lock))
    repo = LanguageRepository(SQLiteGateway(db, lock))
    created: list[dict] = []

    async def orphan_translation() -> None:
        with pytest.raises(StoreError, match="FOREIGN KEY"):
            await failing_repo.create_translation("no-such-language", "en", "Ghost")

    async def new_language() -> None:
        created.append(await repo.create(CITY_ID, None, None))

    for _ in range(20):
        await asyncio.gather(orphan_translation(), new_language())

    assert len(created) == 20
    for language in created:
        assert await repo.get_by_id(language["id"]) is not None


async def test_deleting_a_language_cascades(sqlite_gateway):
    repo = LanguageRepository(sqlite_gateway)
    await _seed_taxonomy(sqlite_gateway)
    language = await repo.create(CITY_ID, None, None)
    await repo.create_translation(language["id"], "en", "Spanish")
    await repo.replace_taxonomies(language["id"], ["value-europe"])

    await repo.delete(language["id"])

    assert await repo.get_translations(language["id"]) == []
    assert await repo.get_taxonomy_value_ids(language["id"]) == []


async def test_import_batch_end_to_end(sqlite_gateway):
    await _seed_taxonomy(sqlite_gateway)
    repo = LanguageRepository(sqlite_gateway)
    service = ImportService(
        CityRepository(sqlite_gateway), RowImporter(repo), ListingCache(60), default_locale="en"
    )
    mapping = TaxonomyMapping(
        external_column="Region",
        internal_category_id="type-region",
        value_map={"Europe": "value-europe", "Asia": "value-asia"},
    )
    rows = [
        ImportRow(row_number=2, name="  Spanish  ", iso_code="SPA", taxonomies={"Region": "Europe"}),
        ImportRow(row_number=3, name="Mandarin", endonym="普通话", taxonomies={"Region": "Asia"}),
        ImportRow(row_number=4, name="'; DROP TABLE languages; --"),
    ]

    summary = await service.import_batch(
        rows, ImportConfig(tenant_key=CITY_SLUG, taxonomy_mappings=[mapping], skip_errors=True)
    )

    assert (summary.total, summary.successful, summary.failed) == (3, 2, 1)
    assert "invalid characters" in summary.results[2].error

    listing = await repo.list_for_city(CITY_ID, "en")
    assert sorted((item["name"], item["iso_639_3_code"]) for item in listing) == [
        ("Mandarin", None),
        ("Spanish", "spa"),
    ]
    spanish_id = summary.results[0].language_id
    assert await repo.get_taxonomy_value_ids(spanish_id) == ["value-europe"]

    again = await service.import_batch(
        rows[:1],
        ImportConfig(tenant_key=CITY_SLUG, taxonomy_mappings=[mapping], update_existing=True),
    )
    assert again.results[0].language_id == spanish_id
    assert len(await repo.list_for_city(CITY_ID, "en")) == 2
