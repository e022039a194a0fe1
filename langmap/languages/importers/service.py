import structlog

from langmap.cities.repository import CityRepository
from langmap.exceptions import StoreError
from langmap.languages.importers.schemas import (
    ImportConfig,
    ImportResult,
    ImportRow,
    ImportSummary,
)
from langmap.languages.importers.worker import RowImporter
from langmap.listing_cache import ListingCache

logger = structlog.get_logger()

LANGUAGES_VIEW = "languages"


class ImportService:
    def __init__(
        self,
        cities: CityRepository,
        row_importer: RowImporter,
        cache: ListingCache,
        default_locale: str,
    ) -> None:
        self._cities = cities
        self._row_importer = row_importer
        self._cache = cache
        self._default_locale = default_locale

    async def import_batch(self, rows: list[ImportRow], config: ImportConfig) -> ImportSummary:
        """Import rows in order into the city named by `config.tenant_key`.

        Row-level problems never raise; they are reported in the summary.
        With `skip_errors` off the batch stops at the first failed row and the
        rows after it are counted as failed without being attempted.
        """
        if not rows:
            return ImportSummary(total=0, successful=0, failed=0, error="No rows provided for import")

        if not config.tenant_key:
            return self._all_failed(rows, "City slug is required")

        try:
            city_id = await self._cities.get_id_by_slug(config.tenant_key)
        except StoreError as exc:
            logger.error("import_city_lookup_failed", city=config.tenant_key, error=exc.message)
            return self._all_failed(rows, exc.message, row_error="Bulk import failed")

        if city_id is None:
            return self._all_failed(rows, f"City not found: {config.tenant_key}")

        locale = config.locale or self._default_locale
        results: list[ImportResult] = []
        successful = 0
        failed = 0

        for row in rows:
            try:
                result = await self._row_importer.import_row(
                    row,
                    city_id,
                    locale,
                    config.taxonomy_mappings,
                    config.update_existing,
                )
            except Exception as exc:
                logger.exception("import_row_crashed", city=config.tenant_key, row=row.row_number)
                result = ImportResult(
                    row_number=row.row_number,
                    success=False,
                    name=row.name,
                    error=str(exc) or "Unknown error occurred",
                )

            results.append(result)

            if result.success:
                successful += 1
                continue

            failed += 1
            if not config.skip_errors:
                not_attempted = len(rows) - len(results)
                logger.warning(
                    "import_stopped",
                    city=config.tenant_key,
                    row=row.row_number,
                    error=result.error,
                    successful=successful,
                    not_attempted=not_attempted,
                )
                self._invalidate_listing(config.tenant_key, successful)
                return ImportSummary(
                    total=len(rows),
                    successful=successful,
                    failed=failed + not_attempted,
                    results=results,
                    error=f"Import stopped at row {row.row_number}: {result.error}",
                )

        logger.info(
            "import_completed",
            city=config.tenant_key,
            locale=locale,
            total=len(rows),
            successful=successful,
            failed=failed,
        )
        self._invalidate_listing(config.tenant_key, successful)

        return ImportSummary(
            total=len(rows),
            successful=successful,
            failed=failed,
            results=results,
        )

    def _invalidate_listing(self, city_slug: str, successful: int) -> None:
        if successful == 0:
            return
        try:
            self._cache.invalidate(city_slug, LANGUAGES_VIEW)
        except Exception:
            logger.warning("listing_invalidation_failed", city=city_slug, exc_info=True)

    @staticmethod
    def _all_failed(
        rows: list[ImportRow], error: str, row_error: str | None = None
    ) -> ImportSummary:
        logger.warning("import_rejected", rows=len(rows), error=error)
        return ImportSummary(
            total=len(rows),
            successful=0,
            failed=len(rows),
            results=[
                ImportResult(
                    row_number=row.row_number,
                    success=False,
                    name=row.name,
                    error=row_error or error,
                )
                for row in rows
            ],
            error=error,
        )
