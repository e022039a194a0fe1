from pydantic import BaseModel, ConfigDict, Field


class ImportRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    row_number: int = Field(ge=1)
    name: str | None = None
    endonym: str | None = None
    iso_code: str | None = None
    taxonomies: dict[str, str] = Field(default_factory=dict)
    custom_fields: dict[str, str] = Field(default_factory=dict)


class TaxonomyMapping(BaseModel):
    external_column: str
    internal_category_id: str
    value_map: dict[str, str] = Field(default_factory=dict)


class ImportConfig(BaseModel):
    tenant_key: str | None = None
    locale: str | None = None
    taxonomy_mappings: list[TaxonomyMapping] = Field(default_factory=list)
    skip_errors: bool = False
    update_existing: bool = False


class ImportRequest(BaseModel):
    rows: list[ImportRow]
    config: ImportConfig


class ImportResult(BaseModel):
    row_number: int
    success: bool
    name: str | None = None
    language_id: str | None = None
    error: str | None = None


class ImportSummary(BaseModel):
    total: int
    successful: int
    failed: int
    results: list[ImportResult] = Field(default_factory=list)
    error: str | None = None
