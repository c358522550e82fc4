# aad_trace/core/var.py
from __future__ import annotations
import numbers
from typing import Optional

class ADVar:
    """
    Active scalar recorded on a trace.

    Attributes
    ----------
    val : float
        Forward (primal) value computed while recording.
    index : int
        Trace index of the entry that produced this value.
    recording : Recording
        The open session owning that entry. Non-owning: the ADVar must not
        be used for arithmetic once its recording has been closed.
    name : Optional[str]
        Optional debug/pretty-print name.
    """

    # Make NumPy scalars hand binary ops back to the reflected ADVar methods
    __array_priority__ = 1000
    __array_ufunc__ = None

    def __init__(self, val, *, recording, index: int, name: Optional[str] = None):
        if not isinstance(val, numbers.Real):
            raise TypeError(f"ADVar only accepts real scalars, but got {type(val)}")
        self.val = float(val)
        self.recording = recording
        self.index = index
        self.name = name

    def __repr__(self):
        return f"ADVar({self.val!r}, slot={self.index}, name={self.name!r})"

    def __float__(self):
        return self.val

    # Comparisons read the payload only; the branch taken is frozen into the trace
    def __lt__(self, other): return self.val < _plain(other)
    def __le__(self, other): return self.val <= _plain(other)
    def __gt__(self, other): return self.val > _plain(other)
    def __ge__(self, other): return self.val >= _plain(other)

    # Operator overloading for arithmetic operations
    def __add__(self, other):
        from ..ops.arithmetic import add
        return add(self, other)

    def __radd__(self, other):
        from ..ops.arithmetic import add
        return add(other, self)

    def __sub__(self, other):
        from ..ops.arithmetic import sub
        return sub(self, other)

    def __rsub__(self, other):
        from ..ops.arithmetic import sub
        return sub(other, self)

    def __mul__(self, other):
        from ..ops.arithmetic import mul
        return mul(self, other)

    def __rmul__(self, other):
        from ..ops.arithmetic import mul
        return mul(other, self)

    def __truediv__(self, other):
        from ..ops.arithmetic import div
        return div(self, other)

    def __rtruediv__(self, other):
        from ..ops.arithmetic import div
        return div(other, self)

    def __neg__(self):
        from ..ops.arithmetic import neg
        return neg(self)

    def __pos__(self):
        return self

    def __abs__(self):
        from ..ops.arithmetic import fabs
        return fabs(self)

    def __pow__(self, other):
        from ..ops.arithmetic import pow
        return pow(self, other)

    def __rpow__(self, other):
        from ..ops.arithmetic import pow
        return pow(other, self)

def _plain(x):
    return x.val if isinstance(x, ADVar) else x
