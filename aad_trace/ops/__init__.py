# aad_trace/ops/__init__.py

# Importing the modules registers every op rule
from . import registry
from . import arithmetic
from . import transcendental
from . import special

# Convenience re-exports so users can do: from aad_trace.ops import mul, exp, ...
from .arithmetic import add, sub, mul, div, neg, square, pow, fabs
from .transcendental import exp, log, sqrt, sin, cos, tan, tanh, erf
from .special import norm_cdf

__all__ = [
    "add", "sub", "mul", "div", "neg", "square", "pow", "fabs",
    "exp", "log", "sqrt", "sin", "cos", "tan", "tanh", "erf",
    "norm_cdf",
]
