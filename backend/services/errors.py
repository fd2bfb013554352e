"""Error kinds raised by the common-layout import pipeline.

Each carries the HTTP status and a short machine-readable code so the
route layer can answer without inspecting messages.
"""


class LayoutImportError(Exception):
    status_code = 500
    code = "layout_import_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.message, "code": self.code}


class ArchiveParseError(LayoutImportError):
    """Archive is not a zip, lacks .shp/.shx/.dbf, or cannot be decoded."""
    status_code = 400
    code = "archive_parse_error"


class EmptyFeatureSetError(LayoutImportError):
    status_code = 400
    code = "empty_feature_set"


class MissingBuildingError(LayoutImportError):
    status_code = 400
    code = "missing_building"


class DegenerateBoundsError(LayoutImportError):
    """Building bounding box has zero width or height."""
    status_code = 422
    code = "degenerate_bounds"


class PersistenceError(LayoutImportError):
    status_code = 500
    code = "persistence_error"
