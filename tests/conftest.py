import aiosqlite
import pytest

from langmap.cities.repository import CityRepository
from langmap.database import create_schema
from langmap.languages.importers.service import ImportService
from langmap.languages.importers.worker import RowImporter
from langmap.languages.repository import LanguageRepository
from langmap.listing_cache import ListingCache
from langmap.store.gateway import SQLiteGateway
from tests.fakes import InMemoryGateway

CITY_ID = "city-berlin"
CITY_SLUG = "berlin"


@pytest.fixture
def memory_gateway() -> InMemoryGateway:
    gateway = InMemoryGateway()
    gateway.seed("cities", {"id": CITY_ID, "slug": CITY_SLUG, "name": "Berlin"})
    return gateway


@pytest.fixture
def language_repo(memory_gateway) -> LanguageRepository:
    return LanguageRepository(memory_gateway)


@pytest.fixture
def listing_cache() -> ListingCache:
    return ListingCache(ttl_seconds=60)


@pytest.fixture
def import_service(memory_gateway, language_repo, listing_cache) -> ImportService:
    return ImportService(
        CityRepository(memory_gateway),
        RowImporter(language_repo),
        listing_cache,
        default_locale="en",
    )


@pytest.fixture
async def db():
    conn = await aiosqlite.connect(":memory:")
    conn.row_factory = aiosqlite.Row
    await create_schema(conn)
    yield conn
    await conn.close()


@pytest.fixture
async def sqlite_gateway(db) -> SQLiteGateway:
    gateway = SQLiteGateway(db)
    await gateway.insert("cities", {"id": CITY_ID, "slug": CITY_SLUG, "name": "Berlin"})
    return gateway
