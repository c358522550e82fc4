# aad_trace/ops/special.py
import numpy as np
from scipy.special import erf as scipy_erf
from .registry import register
from .arithmetic import _apply

SQRT_TWO_PI = np.sqrt(2.0 * np.pi)

def norm_pdf(x):
    return np.exp(-0.5 * x * x) / SQRT_TWO_PI

@register("norm_cdf")
def _norm_cdf_rule(x):
    """N(x) = 0.5 * (1 + erf(x/√2)), with dN/dx = phi(x)."""
    return 0.5 * (1.0 + np.float64(scipy_erf(x / np.sqrt(2.0)))), (norm_pdf(x),)

def norm_cdf(x):
    """Primitive: returns N(x) and records the local partial phi(x)."""
    return _apply("norm_cdf", x)
