"""
Error taxonomy for the ingestion and reconciliation core.

A missing CV during reconciliation is not an error: it is reported through
FileResolution.status (see cvintake.services.filename_resolver).
"""


class CVIntakeError(Exception):
    """Base class for all core errors"""
    pass


class TextExtractionError(CVIntakeError):
    """Base class for failures while turning a file into text"""
    pass


class CapabilityMissing(TextExtractionError):
    """The extraction backend for a format is not installed"""

    def __init__(self, extension: str, package: str):
        self.extension = extension
        self.package = package
        super().__init__(
            f"Cannot read {extension} files: the '{package}' package is not installed"
        )


class UnsupportedFormat(TextExtractionError):
    """Unrecognized extension whose content could not be read as text either"""
    pass


class ExtractionFailure(TextExtractionError):
    """The backend raised on malformed input or the file could not be read"""
    pass


class StoreFailure(CVIntakeError):
    """Persistence layer error (constraint violation, I/O error)"""
    pass


class IngestionFailure(CVIntakeError):
    """
    A single ingestion aborted.

    Carries the pipeline step that failed and the underlying cause.
    """

    def __init__(self, step: str, cause: BaseException):
        self.step = step
        self.cause = cause
        super().__init__(f"Ingestion failed during {step}: {cause}")
