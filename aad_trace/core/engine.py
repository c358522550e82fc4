# aad_trace/core/engine.py
from __future__ import annotations
import logging
from typing import Sequence

import numpy as np

from ..config import ADConfig
from ..errors import RecordingClosed, RecordingOpen
from .. import ops  # registers every op rule used by zero_order
from ..ops.registry import evaluate
from .node import Entry
from .tape import Recording, Trace

logger = logging.getLogger(__name__)

def require_trace(trace) -> Trace:
    if isinstance(trace, Recording):
        if trace.closed:
            if trace.trace is None:
                raise RecordingClosed(
                    f"recording {trace.session_id!r} was discarded and has no trace"
                )
            return trace.trace
        raise RecordingOpen(
            f"recording {trace.session_id!r} must be closed before it can be evaluated"
        )
    if not isinstance(trace, Trace):
        raise TypeError(f"expected a closed Trace, got {type(trace)}")
    return trace

# ---------------- forward scalar sweep ---------------- #
def forward_evaluate(trace: Trace, tangent_in: Sequence[float]) -> np.ndarray:
    """
    Forward (tangent) sweep: directional derivative ẏ = J·ẋ.

    Args:
        trace: a closed Trace.
        tangent_in: ẋ, one value per independent (length n).

    Returns:
        np.ndarray of shape [m] with the tangents of the dependents.

    Notes:
        - Entries are visited in creation order; each tangent is
              ṫ_k = Σ_i (∂t_k/∂t_i) · ṫ_i
          using the local partials frozen at recording time.
        - Only the trace is read; the tangent buffer belongs to this call.
    """
    trace = require_trace(trace)
    xdot = ADConfig.as_vector(tangent_in, trace.n, "tangent")
    logger.debug("forward sweep over %d entries of %r", len(trace), trace.session_id)

    tangents = np.zeros(len(trace), dtype=ADConfig.DTYPE)
    for i, slot in enumerate(trace.independents):
        tangents[slot] = xdot[i]

    for k, entry in enumerate(trace.entries):
        if not entry.operand_slots:
            continue  # inputs keep their seed, constants stay zero
        acc = 0.0
        for slot, partial in zip(entry.operand_slots, entry.local_partials):
            t = tangents[slot]
            if t != 0.0:  # same zero-skip as the reverse sweep
                acc += partial * t
        tangents[k] = acc

    return tangents[list(trace.dependents)]

# ---------------- reverse scalar sweep ---------------- #
def reverse_evaluate(trace: Trace, weight_in: Sequence[float]) -> np.ndarray:
    """
    Reverse (adjoint) sweep: weighted gradient z̄ = ūᵀ·J.

    Args:
        trace: a closed Trace.
        weight_in: ū, one weight per dependent (length m).

    Returns:
        np.ndarray of shape [n] with the adjoints of the independents.

    Notes:
        - For each entry, from last to first, we accumulate:
              ā[operand] += ā[entry] * (∂entry/∂operand)
          A slot with several consumers collects all of their contributions.
        - Dependents are seeded with +=, so a value marked twice gets both weights.
    """
    trace = require_trace(trace)
    ubar = ADConfig.as_vector(weight_in, trace.m, "weight")
    logger.debug("reverse sweep over %d entries of %r", len(trace), trace.session_id)

    adjoints = np.zeros(len(trace), dtype=ADConfig.DTYPE)
    for j, slot in enumerate(trace.dependents):
        adjoints[slot] += ubar[j]

    for k in range(len(trace) - 1, -1, -1):
        entry = trace.entries[k]
        a = adjoints[k]
        if a == 0.0:
            continue  # nothing to propagate
        for slot, partial in zip(entry.operand_slots, entry.local_partials):
            adjoints[slot] += a * partial

    return adjoints[list(trace.independents)]

# ---------------- zero-order replay ---------------- #
def zero_order(trace: Trace, point_in: Sequence[float]) -> Trace:
    """
    Replay the recorded operation sequence at a new independent point.

    Every payload and local partial is recomputed with the op rules; folded
    constants and the control flow taken while recording are kept as they
    were. Returns a new closed Trace; `trace` itself is left untouched.
    """
    trace = require_trace(trace)
    x = ADConfig.as_vector(point_in, trace.n, "point")
    inputs = dict(zip(trace.independents, x))
    logger.debug("zero-order replay of %r at %s", trace.session_id, x)

    values = np.empty(len(trace), dtype=ADConfig.DTYPE)
    entries = []
    for k, entry in enumerate(trace.entries):
        if entry.kind == "input":
            v = float(inputs[k])
            entries.append(Entry("input", (), (), v, ()))
        else:
            out, partials = evaluate(entry.kind, entry.arguments(values))
            active = tuple(float(d) for d, c in zip(partials, entry.immediates) if c is None)
            v = float(out)
            entries.append(Entry(entry.kind, entry.operand_slots, active, v, entry.immediates))
        values[k] = v

    return Trace(trace.session_id, entries, trace.independents, trace.dependents)
