from typing import Annotated

from fastapi import Depends

from langmap.cities.repository import CityRepository
from langmap.config import settings
from langmap.database import get_db, get_db_lock
from langmap.languages.importers.service import ImportService
from langmap.languages.importers.worker import RowImporter
from langmap.languages.repository import LanguageRepository
from langmap.languages.service import LanguageListingService
from langmap.listing_cache import ListingCache
from langmap.store.gateway import SQLiteGateway, StoreGateway
from langmap.taxonomies.repository import TaxonomyRepository
from langmap.taxonomies.service import TaxonomyService

_listing_cache = ListingCache(ttl_seconds=settings.listing_cache_ttl_seconds)


def get_listing_cache() -> ListingCache:
    return _listing_cache


def get_gateway() -> StoreGateway:
    return SQLiteGateway(get_db(), get_db_lock())


def get_city_repo() -> CityRepository:
    return CityRepository(get_gateway())


def get_language_repo() -> LanguageRepository:
    return LanguageRepository(get_gateway())


def get_import_service() -> ImportService:
    return ImportService(
        get_city_repo(),
        RowImporter(get_language_repo()),
        get_listing_cache(),
        default_locale=settings.default_locale,
    )


def get_language_listing_service() -> LanguageListingService:
    return LanguageListingService(get_city_repo(), get_language_repo(), get_listing_cache())


def get_taxonomy_service() -> TaxonomyService:
    return TaxonomyService(get_city_repo(), TaxonomyRepository(get_gateway()))


ImportServiceDep = Annotated[ImportService, Depends(get_import_service)]
LanguageListingServiceDep = Annotated[
    LanguageListingService, Depends(get_language_listing_service)
]
TaxonomyServiceDep = Annotated[TaxonomyService, Depends(get_taxonomy_service)]
