from __future__ import annotations


class IntakeError(Exception):
    """Base class for failures raised inside the intake pipeline."""

    code = "server_error"
    status_code = 500

    def to_payload(self) -> dict[str, str]:
        return {"error": self.code, "message": str(self)}


class BadRequest(IntakeError):
    code = "bad_request"
    status_code = 400

    def to_payload(self) -> dict[str, str]:
        return {"error": str(self)}


class PayloadTooLarge(BadRequest):
    code = "file_too_large"
    status_code = 413

    def to_payload(self) -> dict[str, str]:
        return {"error": self.code, "message": str(self)}


class InlineSchemaParseError(IntakeError):
    code = "inline_schema_invalid"


class ObjectStoreConfigError(IntakeError):
    code = "object_store_config"


class ObjectStoreUploadError(IntakeError):
    code = "object_store_upload"


class SpreadsheetEnsureError(IntakeError):
    code = "spreadsheet_ensure"


class SpreadsheetAppendError(IntakeError):
    code = "spreadsheet_append"


class LocalStoreWriteError(IntakeError):
    code = "server_error"
