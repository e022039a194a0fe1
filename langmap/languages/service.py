import structlog

from langmap.cities.repository import CityRepository
from langmap.exceptions import NotFoundError
from langmap.languages.importers.service import LANGUAGES_VIEW
from langmap.languages.repository import LanguageRepository
from langmap.languages.schemas import LanguageListItem
from langmap.listing_cache import ListingCache

logger = structlog.get_logger()


class LanguageListingService:
    def __init__(
        self,
        cities: CityRepository,
        repo: LanguageRepository,
        cache: ListingCache,
    ) -> None:
        self._cities = cities
        self._repo = repo
        self._cache = cache

    async def list_for_city(self, city_slug: str, locale: str) -> list[LanguageListItem]:
        view = f"{LANGUAGES_VIEW}:{locale}"
        cached = self._cache.get(city_slug, view)
        if cached is not None:
            return cached

        city_id = await self._cities.get_id_by_slug(city_slug)
        if city_id is None:
            raise NotFoundError("City", city_slug)

        rows = await self._repo.list_for_city(city_id, locale)
        items = sorted(
            (LanguageListItem(**row) for row in rows),
            key=lambda item: ((item.name or "").casefold(), item.id),
        )

        self._cache.set(city_slug, view, items)
        logger.debug("language_listing_built", city=city_slug, locale=locale, count=len(items))
        return items
