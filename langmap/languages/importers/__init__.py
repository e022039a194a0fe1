from langmap.languages.importers.sanitizers import (
    InvalidNameError,
    sanitize_endonym,
    sanitize_iso_code,
    sanitize_name,
)
from langmap.languages.importers.service import ImportService
from langmap.languages.importers.worker import RowImporter

__all__ = [
    "ImportService",
    "InvalidNameError",
    "RowImporter",
    "sanitize_endonym",
    "sanitize_iso_code",
    "sanitize_name",
]
