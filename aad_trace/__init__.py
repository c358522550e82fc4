# aad_trace/__init__.py
# Trace-recording automatic differentiation: forward and reverse scalar modes

from .core.var import ADVar
from .core.tape import Recording, Trace, open_recording, close_recording, recording
from .core.binding import mark_independent, mark_dependent
from .core.engine import forward_evaluate, reverse_evaluate, zero_order
from .core.seeds import gradient, jacobian, record, value
from .core.graph_utils import (
    get_trace_stats,
    print_trace_summary,
    print_trace_graph,
    analyze_trace_complexity,
)
from .config import ADConfig
from .errors import (
    TapeUsageError,
    AlreadyRecording,
    OutOfOrderBinding,
    IncompleteBinding,
    MalformedTrace,
    RecordingClosed,
    RecordingOpen,
    ForeignTrace,
    DimensionMismatch,
)

# Elementary functions
from . import ops

__all__ = [
    # Recording
    'ADVar',
    'Recording',
    'Trace',
    'open_recording',
    'close_recording',
    'recording',
    'mark_independent',
    'mark_dependent',
    # Engine
    'forward_evaluate',
    'reverse_evaluate',
    'zero_order',
    'gradient',
    'jacobian',
    'record',
    'value',
    # Diagnostics
    'get_trace_stats',
    'print_trace_summary',
    'print_trace_graph',
    'analyze_trace_complexity',
    # Config / errors
    'ADConfig',
    'TapeUsageError',
    'AlreadyRecording',
    'OutOfOrderBinding',
    'IncompleteBinding',
    'MalformedTrace',
    'RecordingClosed',
    'RecordingOpen',
    'ForeignTrace',
    'DimensionMismatch',
    'ops',
]
