# aad_trace/core/seeds.py

#-----------------------------------------------------------------------------
# We "plant" a seed (dy/dy = 1) at the scalar output and let gradients grow
# backwards through the trace.
#-----------------------------------------------------------------------------
from __future__ import annotations
from typing import Any, Callable, List, Sequence, Union
import numpy as np

from ..config import ADConfig
from ..errors import DimensionMismatch
from .binding import mark_dependent, mark_independent
from .engine import forward_evaluate, require_trace, reverse_evaluate, zero_order
from .tape import Recording, Trace, recording
from .var import ADVar


def value(x: Any) -> Any:
    """Return the numeric value of an ADVar; pass through plain numbers unchanged."""
    return x.val if isinstance(x, ADVar) else x


def record(f: Callable[[List[ADVar]], Any], point_in: Sequence[float],
           session_id=None) -> Trace:
    """
    Record one evaluation of f(xs) at `point_in` and return the closed Trace.

    `f` receives the list of active inputs and returns either a single
    active value or a sequence of them (one dependent each).
    """
    x = np.array(point_in, dtype=ADConfig.DTYPE).reshape(-1)
    with recording(session_id, n=x.shape[0]) as rec:
        xs = [mark_independent(rec, i, xi) for i, xi in enumerate(x)]
        out = f(xs)
        if isinstance(out, np.ndarray):
            out = np.ravel(out).tolist()
        outs = out if isinstance(out, (list, tuple)) else [out]
        for j, y in enumerate(outs):
            mark_dependent(rec, j, y)
    return rec.trace


# ----------------------------- gradient ----------------------------- #
def gradient(trace_or_function: Union[Trace, Callable[[List[ADVar]], Any]],
             point_in: Sequence[float]) -> np.ndarray:
    """
    Gradient of a scalar-output function at `point_in`.

    - Given a callable f(xs) -> scalar: records f once in a fresh, isolated
      session and runs one reverse sweep with weight [1].
    - Given a closed Trace with m == 1: uses it directly when `point_in`
      equals the recorded point, otherwise replays it at `point_in`
      (zero_order) first.

    Raises:
        DimensionMismatch: output count differs from 1 or the point has the
            wrong length.
    """
    if isinstance(trace_or_function, (Trace, Recording)):
        trace = require_trace(trace_or_function)
        _check_scalar_output(trace)
        x = ADConfig.as_vector(point_in, trace.n, "point")
        if not np.array_equal(x, trace.x):
            trace = zero_order(trace, x)
    elif callable(trace_or_function):
        trace = record(trace_or_function, point_in)
    else:
        raise TypeError(f"gradient expects a Trace or a callable, got {type(trace_or_function)}")

    _check_scalar_output(trace)
    return reverse_evaluate(trace, [1.0])


def _check_scalar_output(trace: Trace):
    if trace.m != 1:
        raise DimensionMismatch(f"gradient needs exactly one dependent, trace has {trace.m}")


# ----------------------------- jacobian ----------------------------- #
def jacobian(trace: Trace) -> np.ndarray:
    """
    Full m×n Jacobian at the recorded point.

    Uses one reverse sweep per dependent when m <= n, otherwise one forward
    sweep per independent.
    """
    trace = require_trace(trace)
    m, n = trace.m, trace.n
    J = np.empty((m, n), dtype=ADConfig.DTYPE)
    if m <= n:
        for j in range(m):
            J[j, :] = reverse_evaluate(trace, ADConfig.basis(m, j))
    else:
        for i in range(n):
            J[:, i] = forward_evaluate(trace, ADConfig.basis(n, i))
    return J
