from pydantic import BaseModel


class LanguageListItem(BaseModel):
    id: str
    name: str | None
    endonym: str | None
    iso_639_3_code: str | None
