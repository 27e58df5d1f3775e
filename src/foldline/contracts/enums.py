"""Modes and kinds shared across the accumulator engine.

These are StrEnums so that plain strings coming from configuration files
or environment variables ("error", "exception") compare equal to members.
"""

from enum import StrEnum


class ErrorHandling(StrEnum):
    """Error-handling policy of an accumulator.

    Values:
        ERROR: Failures are captured and returned as a value from
            result-producing calls (capture mode, the default).
        EXCEPTION: Failures raise at the point of detection, or make the
            awaited result raise for the async accumulator (raise mode).
    """

    ERROR = "error"
    EXCEPTION = "exception"


class StageKind(StrEnum):
    """Kind of stage installed in an accumulator pipeline.

    Used for error attribution and structured log fields.
    """

    SOURCE = "source"
    REDUCE = "reduce"
    MAP = "map"
    FILTER = "filter"
    SORT = "sort"
    PIVOT = "pivot"
