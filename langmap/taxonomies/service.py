import structlog

from langmap.cities.repository import CityRepository
from langmap.exceptions import NotFoundError, ValidationError
from langmap.taxonomies.repository import TaxonomyRepository
from langmap.taxonomies.schemas import TaxonomyTypeOption, TaxonomyValueOption

logger = structlog.get_logger()


class TaxonomyService:
    def __init__(self, cities: CityRepository, repo: TaxonomyRepository) -> None:
        self._cities = cities
        self._repo = repo

    async def get_mapping_options(
        self, city_slug: str, locale: str = "en"
    ) -> list[TaxonomyTypeOption]:
        """List a city's taxonomy types and values for building import mappings.

        Names come from the `locale` translation and fall back to the slug.
        """
        if not city_slug or not city_slug.strip():
            raise ValidationError("City slug is required")

        city_id = await self._cities.get_id_by_slug(city_slug)
        if city_id is None:
            raise NotFoundError("City", city_slug)

        options: list[TaxonomyTypeOption] = []
        for taxonomy_type in await self._repo.list_types(city_id):
            values = [
                TaxonomyValueOption(
                    id=value["id"],
                    slug=value["slug"],
                    name=await self._repo.get_value_name(value["id"], locale) or value["slug"],
                )
                for value in await self._repo.list_values(taxonomy_type["id"])
            ]
            options.append(
                TaxonomyTypeOption(
                    id=taxonomy_type["id"],
                    slug=taxonomy_type["slug"],
                    name=await self._repo.get_type_name(taxonomy_type["id"], locale)
                    or taxonomy_type["slug"],
                    values=values,
                )
            )

        logger.info("taxonomy_mapping_options_listed", city=city_slug, types=len(options))
        return options
