"""NYC Shootings Analysis: Error taxonomy

Dataset-level errors (``SourceUnavailable``, ``InsufficientSamples``,
``ConflictingSamples``, ``InsufficientData``) and a bad ``UnknownBorough``
setting abort the run.  ``MalformedRecord``
is row-level: the reducer catches it, counts it and moves on.
"""


class AnalysisError(Exception):
    """Base class for every error raised by the analysis pipeline."""


class SourceUnavailable(AnalysisError):
    """A source could not be fetched, read, or lacks required columns."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Source unavailable: {source} ({reason})")


class MalformedRecord(AnalysisError):
    """A single incident row could not be turned into an IncidentRecord."""

    def __init__(self, reason: str, row: dict | None = None):
        self.reason = reason
        self.row = row or {}
        super().__init__(f"Malformed record ({reason})")


class InsufficientSamples(AnalysisError):
    """A borough has fewer than two distinct population sample years."""

    def __init__(self, borough: str, n_samples: int):
        self.borough = borough
        self.n_samples = n_samples
        super().__init__(
            f"Cannot interpolate population for {borough}: "
            f"{n_samples} distinct sample year(s), need at least 2"
        )


class ConflictingSamples(AnalysisError):
    """Two population samples share a (borough, year) key but disagree."""

    def __init__(self, borough: str, year: int):
        self.borough = borough
        self.year = year
        super().__init__(f"Conflicting population samples for {borough} in {year}")


class InsufficientData(AnalysisError):
    """Too few (homicide_rate, population) pairs to fit a regression."""

    def __init__(self, label: str, n_obs: int):
        self.label = label
        self.n_obs = n_obs
        super().__init__(f"Not enough observations to fit '{label}': {n_obs}")


class UnknownBorough(AnalysisError, ValueError):
    """A borough name (from settings or a caller) is not one of the five boroughs."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Unrecognised borough: {label!r}")
