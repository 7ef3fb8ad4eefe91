"""
Errors and warnings raised by the subset selection engine.

Every error derives from ``SubsetSelectionError`` (itself a ``ValueError``)
so callers can catch the whole family at once. All of them abort the fit or
fold in progress; nothing is retried.
"""


class SubsetSelectionError(ValueError):
    """Base class for subset selection failures."""


class RankDeficiencyError(SubsetSelectionError):
    """The design restricted to an active set is not full column rank."""


class DegenerateFitError(SubsetSelectionError):
    """A residual sum of squares cannot enter the log-penalty score."""


class SchemaMismatchError(SubsetSelectionError):
    """Two design matrices do not expose the same columns in the same order."""


class InvalidFoldCountError(SubsetSelectionError):
    """The number of folds is not in the range 2..n."""


class DroppedColumnWarning(UserWarning):
    """A column was constant in a training partition and was left out."""


class SkippedFoldWarning(UserWarning):
    """A cross-validation fold failed and was skipped."""
