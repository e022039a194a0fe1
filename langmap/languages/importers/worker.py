import structlog

from langmap.exceptions import StoreError
from langmap.languages.importers.sanitizers import (
    InvalidNameError,
    sanitize_endonym,
    sanitize_iso_code,
    sanitize_name,
)
from langmap.languages.importers.schemas import ImportResult, ImportRow, TaxonomyMapping
from langmap.languages.repository import LanguageRepository

logger = structlog.get_logger()


class RowImporter:
    """Makes one import row durable: create or update a language, its
    translation for the import locale, and its taxonomy assignments.

    The store has no multi-statement transactions, so a failed translation
    insert on the create path is undone by deleting the new language.
    """

    def __init__(self, repo: LanguageRepository) -> None:
        self._repo = repo

    async def import_row(
        self,
        row: ImportRow,
        city_id: str,
        locale: str,
        taxonomy_mappings: list[TaxonomyMapping],
        update_existing: bool,
    ) -> ImportResult:
        try:
            return await self._import_row(row, city_id, locale, taxonomy_mappings, update_existing)
        except Exception as exc:
            logger.exception(
                "import_row_unexpected_error", row=row.row_number, language_name=row.name
            )
            return self._failure(row, row.name, str(exc) or "Unknown error")

    async def _import_row(
        self,
        row: ImportRow,
        city_id: str,
        locale: str,
        taxonomy_mappings: list[TaxonomyMapping],
        update_existing: bool,
    ) -> ImportResult:
        try:
            name = sanitize_name(row.name)
        except InvalidNameError as exc:
            logger.info("import_row_rejected", row=row.row_number, reason=exc.reason)
            return self._failure(row, row.name, exc.message)

        endonym = sanitize_endonym(row.endonym)
        iso_code = sanitize_iso_code(row.iso_code)

        try:
            existing = await self._repo.find_by_name(city_id, name, locale)
        except StoreError as exc:
            return self._failure(row, name, f"Failed to look up existing language: {exc.message}")

        if existing is not None:
            if not update_existing:
                return self._failure(row, name, f'Language "{name}" already exists')
            return await self._update(
                row, existing["id"], name, endonym, iso_code, locale, taxonomy_mappings
            )

        return await self._create(row, city_id, name, endonym, iso_code, locale, taxonomy_mappings)

    async def _update(
        self,
        row: ImportRow,
        language_id: str,
        name: str,
        endonym: str | None,
        iso_code: str | None,
        locale: str,
        taxonomy_mappings: list[TaxonomyMapping],
    ) -> ImportResult:
        try:
            await self._repo.update(language_id, endonym, iso_code)
        except StoreError as exc:
            return self._failure(row, name, f"Failed to update language: {exc.message}")

        try:
            await self._repo.update_translation(language_id, locale, name)
        except StoreError as exc:
            return self._failure(row, name, f"Failed to update translation: {exc.message}")

        await self._reconcile_taxonomies(language_id, row, taxonomy_mappings)

        logger.info("language_import_updated", row=row.row_number, language_id=language_id)
        return ImportResult(row_number=row.row_number, success=True, name=name, language_id=language_id)

    async def _create(
        self,
        row: ImportRow,
        city_id: str,
        name: str,
        endonym: str | None,
        iso_code: str | None,
        locale: str,
        taxonomy_mappings: list[TaxonomyMapping],
    ) -> ImportResult:
        try:
            language = await self._repo.create(city_id, endonym, iso_code)
        except StoreError as exc:
            return self._failure(row, name, f"Failed to create language: {exc.message}")

        language_id = language["id"]

        try:
            await self._repo.create_translation(language_id, locale, name)
        except StoreError as exc:
            await self._rollback_language(language_id, row)
            return self._failure(row, name, f"Failed to create translation: {exc.message}")

        await self._reconcile_taxonomies(language_id, row, taxonomy_mappings)

        logger.info("language_import_created", row=row.row_number, language_id=language_id)
        return ImportResult(row_number=row.row_number, success=True, name=name, language_id=language_id)

    async def _rollback_language(self, language_id: str, row: ImportRow) -> None:
        try:
            await self._repo.delete(language_id)
        except StoreError as exc:
            # The caller still gets the translation error; orphans are found via this log.
            logger.warning(
                "language_rollback_failed",
                row=row.row_number,
                language_id=language_id,
                error=exc.message,
            )
            return
        logger.info("language_rolled_back", row=row.row_number, language_id=language_id)

    async def _reconcile_taxonomies(
        self,
        language_id: str,
        row: ImportRow,
        taxonomy_mappings: list[TaxonomyMapping],
    ) -> list[str]:
        """Replace the language's taxonomy assignments with the row's mapped values.

        Unmapped labels are dropped and store failures are only logged:
        taxonomy data never fails the row.
        """
        value_ids: list[str] = []
        for mapping in taxonomy_mappings:
            label = row.taxonomies.get(mapping.external_column)
            if not label:
                continue

            value_id = mapping.value_map.get(label)
            if not value_id:
                logger.warning(
                    "taxonomy_value_unmapped",
                    row=row.row_number,
                    column=mapping.external_column,
                    value=label,
                )
                continue

            if value_id not in value_ids:
                value_ids.append(value_id)

        try:
            await self._repo.replace_taxonomies(language_id, value_ids)
        except StoreError as exc:
            logger.error(
                "taxonomy_assignment_failed",
                row=row.row_number,
                language_id=language_id,
                error=exc.message,
            )
            return []

        return value_ids

    @staticmethod
    def _failure(row: ImportRow, name: str | None, error: str) -> ImportResult:
        return ImportResult(row_number=row.row_number, success=False, name=name, error=error)
