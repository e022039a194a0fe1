from pydantic import BaseModel


class TaxonomyValueOption(BaseModel):
    id: str
    slug: str
    name: str


class TaxonomyTypeOption(BaseModel):
    id: str
    slug: str
    name: str
    values: list[TaxonomyValueOption]
