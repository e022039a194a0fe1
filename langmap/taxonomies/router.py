from fastapi import APIRouter, Query

from langmap.config import settings
from langmap.dependencies import TaxonomyServiceDep
from langmap.taxonomies.schemas import TaxonomyTypeOption

router = APIRouter()


@router.get("/{city_slug}/mapping-options", response_model=list[TaxonomyTypeOption])
async def get_mapping_options(
    city_slug: str,
    service: TaxonomyServiceDep,
    locale: str | None = Query(default=None),
) -> list[TaxonomyTypeOption]:
    return await service.get_mapping_options(city_slug, locale or settings.default_locale)
