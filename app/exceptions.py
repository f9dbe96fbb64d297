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


class StoreWriteError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="STORE_WRITE_ERROR")


# Batch-level errors: abort an import before any row is written.


class FormatError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="FORMAT_ERROR")


class EmptyBatchError(AppError):
    def __init__(self, message: str = "workbook has no data rows"):
        super().__init__(message, code="EMPTY_BATCH")


# Row-level errors: recorded as an outcome, never abort sibling rows.


class RowError(AppError):
    pass


class FieldMissingError(RowError):
    def __init__(self, label: str):
        self.label = label
        super().__init__(f"missing field {label}", code="FIELD_MISSING")


class ResolutionError(RowError):
    def __init__(self, value: object):
        self.value = value
        super().__init__(f"referenced entity not found: {value}", code="UNRESOLVED")


class DuplicateSkip(RowError):
    def __init__(self, value: object):
        self.value = value
        super().__init__(f"duplicate natural key: {value}", code="DUPLICATE")
