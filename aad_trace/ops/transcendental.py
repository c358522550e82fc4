# aad_trace/ops/transcendental.py
import numpy as np
from scipy.special import erf as scipy_erf
from .registry import register
from .arithmetic import _apply

@register("exp")
def _exp_rule(x):
    ex = np.exp(x)
    return ex, (ex,)

register("log")(lambda x: (np.log(x), (1.0 / x,)))

@register("sqrt")
def _sqrt_rule(x):
    s = np.sqrt(x)
    return s, (0.5 / s,)

register("sin")(lambda x: (np.sin(x), (np.cos(x),)))
register("cos")(lambda x: (np.cos(x), (-np.sin(x),)))

@register("tan")
def _tan_rule(x):
    c = np.cos(x)
    return np.tan(x), (1.0 / (c * c),)

@register("tanh")
def _tanh_rule(x):
    t = np.tanh(x)
    return t, (1.0 - t * t,)

@register("erf")
def _erf_rule(x):
    """
    Error function: erf(x) = (2/√π) ∫₀ˣ e^(-t²) dt

    Derivative: d/dx erf(x) = (2/√π) * e^(-x²)
    """
    return np.float64(scipy_erf(x)), ((2.0 / np.sqrt(np.pi)) * np.exp(-x * x),)

def exp(x): return _apply("exp", x)
def log(x): return _apply("log", x)
def sqrt(x): return _apply("sqrt", x)
def sin(x): return _apply("sin", x)
def cos(x): return _apply("cos", x)
def tan(x): return _apply("tan", x)
def tanh(x): return _apply("tanh", x)
def erf(x): return _apply("erf", x)
