# aad_trace/core/__init__.py

"""
Core public API for the tracing engine.

Recording:
    open_recording / close_recording / recording : session lifecycle
    mark_independent / mark_dependent            : input/output binding
    ADVar                                        : the active scalar
Replay:
    forward_evaluate : tangent sweep, ẏ = J·ẋ
    reverse_evaluate : adjoint sweep, z̄ = ūᵀ·J
    zero_order       : replay at a new point
Convenience:
    gradient, jacobian, record, value
"""

from .var import ADVar
from .tape import Recording, Trace, open_recording, close_recording, recording
from .binding import mark_independent, mark_dependent
from .engine import forward_evaluate, reverse_evaluate, zero_order
from .seeds import gradient, jacobian, record, value

__all__ = [
    "ADVar",
    "Recording", "Trace",
    "open_recording", "close_recording", "recording",
    "mark_independent", "mark_dependent",
    "forward_evaluate", "reverse_evaluate", "zero_order",
    "gradient", "jacobian", "record", "value",
]
