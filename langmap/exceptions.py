class AppError(Exception):
    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} '{resource_id}' not found", code="NOT_FOUND")


class ValidationError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class StoreError(AppError):
    """A store gateway call failed (constraint violation, bad table, I/O)."""

    def __init__(self, message: str, table: str | None = None):
        self.table = table
        super().__init__(message, code="STORE_ERROR")
