# aad_trace/ops/registry.py
"""
Op-kind rules.

Each rule maps the full argument tuple of a primitive (active payloads and
folded constants alike, as np.float64) to

    (value, (∂value/∂arg_0, ∂value/∂arg_1, ...))

The recorder calls a rule once to build an Entry; `engine.zero_order` calls
the same rule again to replay an Entry at a new point.
"""
from __future__ import annotations
from typing import Callable, Dict, Tuple
import numpy as np

Rule = Callable[..., Tuple[np.float64, Tuple[np.float64, ...]]]

RULES: Dict[str, Rule] = {}

def register(kind: str):
    """Decorator: install `fn` as the rule for `kind`."""
    def deco(fn: Rule) -> Rule:
        if kind in RULES:
            raise KeyError(f"rule for {kind!r} already registered")
        RULES[kind] = fn
        return fn
    return deco

def evaluate(kind: str, args: Tuple[float, ...]):
    """
    Run the rule for `kind` on `args`.

    IEEE semantics: division by zero, log of zero etc. produce inf/nan
    silently instead of raising or warning.
    """
    try:
        rule = RULES[kind]
    except KeyError:
        raise KeyError(f"no rule registered for op kind {kind!r}") from None
    with np.errstate(all="ignore"):
        return rule(*(np.float64(a) for a in args))

# Bookkeeping kinds used by the binding protocol
register("copy")(lambda a: (a, (np.float64(1.0),)))
register("const")(lambda c: (c, (np.float64(0.0),)))
