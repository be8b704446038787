from __future__ import annotations


class ReportEngineError(Exception):
    """Base error for the report engine."""


class LayoutError(ReportEngineError):
    """Layout pass was driven incorrectly."""


class ComposerStateError(LayoutError):
    """A composer operation was called out of order."""


class DocumentFinalizedError(LayoutError):
    """The document was modified after it was finalized."""


class GradientError(LayoutError, ValueError):
    """Color stops do not describe a valid gradient."""


class ReportDataError(ReportEngineError, ValueError):
    """Report input could not be turned into a report record."""
