# aad_trace/errors.py
"""
Exception taxonomy for the tracing engine.

Usage faults (session protocol violations) derive from TapeUsageError and are
programmer errors: they are raised synchronously and never retried.
Length problems on the numeric buffers handed to the evaluators raise
DimensionMismatch before any sweep work starts.

NaN/Inf coming out of the arithmetic itself is *not* an engine fault and has
no exception here.
"""


class TapeUsageError(RuntimeError):
    """Base class for violations of the recording protocol."""


class AlreadyRecording(TapeUsageError):
    """A recording with the same session id is already open."""


class OutOfOrderBinding(TapeUsageError):
    """Independent/dependent marked with a non-sequential index or at the wrong time."""


class IncompleteBinding(TapeUsageError):
    """Fewer independents/dependents were marked than the session declared."""


class MalformedTrace(TapeUsageError):
    """Arithmetic happened before every declared independent was marked."""


class RecordingClosed(TapeUsageError):
    """Arithmetic or binding on a recording that has already been closed."""


class RecordingOpen(TapeUsageError):
    """An evaluator was handed a recording that is still open."""


class ForeignTrace(TapeUsageError):
    """Active values from two different recordings were combined."""


class DimensionMismatch(ValueError):
    """A tangent/weight/point vector does not match the trace's n or m."""
