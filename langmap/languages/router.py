from fastapi import APIRouter, Query

from langmap.config import settings
from langmap.dependencies import ImportServiceDep, LanguageListingServiceDep
from langmap.languages.importers.schemas import ImportRequest, ImportSummary
from langmap.languages.schemas import LanguageListItem

router = APIRouter()


@router.post("/import", response_model=ImportSummary)
async def import_languages(
    data: ImportRequest,
    service: ImportServiceDep,
) -> ImportSummary:
    return await service.import_batch(data.rows, data.config)


@router.get("/{city_slug}", response_model=list[LanguageListItem])
async def list_languages(
    city_slug: str,
    service: LanguageListingServiceDep,
    locale: str | None = Query(default=None),
) -> list[LanguageListItem]:
    return await service.list_for_city(city_slug, locale or settings.default_locale)
