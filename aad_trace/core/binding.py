# aad_trace/core/binding.py
"""
Independent/dependent binding.

Independents are marked first, in index order, before any arithmetic;
dependents are marked last, in index order, after all arithmetic.
"""
from __future__ import annotations
import numbers
from typing import Any, MutableSequence, Optional

from ..errors import ForeignTrace, OutOfOrderBinding
from .node import Entry
from .tape import Recording
from .var import ADVar


def mark_independent(rec: Recording, index: int, value: Any) -> ADVar:
    """
    Bind `value` as independent slot `index` and return the active input.

    Raises:
        OutOfOrderBinding: `index` is not the next slot, exceeds the declared n,
            or arithmetic / dependent marking already happened.
    """
    rec.check_open()
    if rec.has_arithmetic or rec.dependents:
        raise OutOfOrderBinding(
            f"independent {index} marked after arithmetic started in {rec.session_id!r}"
        )
    if index != len(rec.independents):
        raise OutOfOrderBinding(
            f"independent {index} marked, expected index {len(rec.independents)}"
        )
    if rec.n_declared is not None and index >= rec.n_declared:
        raise OutOfOrderBinding(
            f"independent {index} exceeds the {rec.n_declared} declared inputs"
        )
    if isinstance(value, ADVar):
        value = value.val
    if not isinstance(value, numbers.Real):
        raise TypeError(f"independent value must be a real scalar, got {type(value)}")

    v = float(value)
    idx = rec.append(Entry("input", (), (), v, ()))
    rec.independents.append(idx)
    return ADVar(v, recording=rec, index=idx, name=f"x{index}")


def mark_dependent(rec: Recording, index: int, active_value: Any,
                   out_buffer: Optional[MutableSequence] = None) -> float:
    """
    Bind `active_value` as dependent slot `index`.

    An ADVar gets a "copy" entry pointing at it; a plain number gets a
    "const" entry. The payload is written to `out_buffer[index]` when a
    buffer is given, and returned.

    Raises:
        OutOfOrderBinding: `index` is not the next slot or exceeds the declared m.
    """
    rec.check_open()
    if index != len(rec.dependents):
        raise OutOfOrderBinding(
            f"dependent {index} marked, expected index {len(rec.dependents)}"
        )
    if rec.m_declared is not None and index >= rec.m_declared:
        raise OutOfOrderBinding(
            f"dependent {index} exceeds the {rec.m_declared} declared outputs"
        )

    if isinstance(active_value, ADVar):
        if active_value.recording is not rec:
            raise ForeignTrace(
                f"dependent {index} belongs to recording {active_value.recording.session_id!r}"
            )
        v = active_value.val
        entry = Entry("copy", (active_value.index,), (1.0,), v, (None,))
    elif isinstance(active_value, numbers.Real):
        v = float(active_value)
        entry = Entry("const", (), (), v, (v,))
    else:
        raise TypeError(f"dependent value must be an ADVar or real scalar, got {type(active_value)}")

    idx = rec.append(entry)
    rec.dependents.append(idx)
    if out_buffer is not None:
        out_buffer[index] = v
    return v
