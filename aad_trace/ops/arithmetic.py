# aad_trace/ops/arithmetic.py
import numbers
import numpy as np
from ..core.var import ADVar
from ..errors import ForeignTrace
from .registry import register, evaluate

def _recording_of(args):
    """The single recording shared by the active arguments (None if all are constants)."""
    rec = None
    for a in args:
        if isinstance(a, ADVar):
            if rec is None:
                rec = a.recording
            elif a.recording is not rec:
                raise ForeignTrace(
                    f"cannot combine values from recordings "
                    f"{rec.session_id!r} and {a.recording.session_id!r}"
                )
    return rec

def _payload(a):
    if isinstance(a, ADVar):
        return a.val
    if isinstance(a, numbers.Real):
        return float(a)
    raise TypeError(f"unsupported operand type for active arithmetic: {type(a)}")

def _apply(kind, *args):
    """
    Generic primitive:
      - computes out.val and the local partials with the registered rule
      - folds plain numbers into the entry as zero-derivative immediates
      - pushes one Entry holding the partials w.r.t. the active arguments
    With no active argument the plain numeric result is returned.
    """
    rec = _recording_of(args)
    vals = tuple(_payload(a) for a in args)
    out, partials = evaluate(kind, vals)
    if rec is None:
        return float(out)

    slots, local, immediates = [], [], []
    for a, d in zip(args, partials):
        if isinstance(a, ADVar):
            slots.append(a.index)
            local.append(float(d))
            immediates.append(None)
        else:
            immediates.append(float(a))

    idx = rec.push_node(
        kind=kind, operand_slots=tuple(slots), local_partials=tuple(local),
        value=float(out), immediates=tuple(immediates),
    )
    return ADVar(float(out), recording=rec, index=idx)

# ---------------- rules ---------------- #
register("add")(lambda a, b: (a + b, (1.0, 1.0)))
register("sub")(lambda a, b: (a - b, (1.0, -1.0)))
register("mul")(lambda a, b: (a * b, (b, a)))
register("div")(lambda a, b: (a / b, (1.0 / b, -a / (b * b))))
register("neg")(lambda a: (-a, (-1.0,)))
register("square")(lambda a: (a * a, (2.0 * a,)))
register("abs")(lambda a: (np.abs(a), (np.sign(a),)))

@register("pow")
def _pow_rule(x, p):
    """
    ∂out/∂x = p * x^(p-1)
    ∂out/∂p = x^p * log(x)   (taken as 0 for x <= 0, where it is undefined
                              for non-integer p)
    """
    out = x ** p
    dfdx = p * x ** (p - 1.0) if p != 0.0 else np.float64(0.0)
    dfdp = out * np.log(x) if x > 0 else np.float64(0.0)
    return out, (dfdx, dfdp)

# ---------------- public primitives ---------------- #
def add(x, y): return _apply("add", x, y)
def sub(x, y): return _apply("sub", x, y)
def mul(x, y): return _apply("mul", x, y)
def div(x, y): return _apply("div", x, y)
def neg(x): return _apply("neg", x)
def square(x): return _apply("square", x)
def pow(x, y): return _apply("pow", x, y)
def fabs(x): return _apply("abs", x)
