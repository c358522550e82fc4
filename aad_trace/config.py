"""
Engine Configuration Utilities

Shared constants and helpers used by the recorder, the sweeps and the
summary printers.
"""

import numpy as np

from .errors import DimensionMismatch


class ADConfig:
    """Shared configuration for the tracing engine"""

    # Every payload, tangent and adjoint buffer uses this dtype
    DTYPE = np.float64

    # print_trace_summary only lists individual entries for traces up to this size
    DETAIL_LIMIT = 100

    # print_trace_graph default
    MAX_PRINTED_ENTRIES = 20

    @staticmethod
    def basis(n: int, i: int) -> np.ndarray:
        """
        Unit direction e_i of length n.

        Example:
            basis(3, 1) -> array([0., 1., 0.])
        """
        if not 0 <= i < n:
            raise IndexError(f"basis index {i} out of range for n={n}")
        e = np.zeros(n, dtype=ADConfig.DTYPE)
        e[i] = 1.0
        return e

    @staticmethod
    def as_vector(seq, length: int, what: str) -> np.ndarray:
        """
        Convert `seq` to a fresh 1-D float64 array and check its length.

        Args:
            seq: scalar, sequence or ndarray
            length: required number of components
            what: name used in the error message (e.g. "tangent")

        Raises:
            DimensionMismatch: if the flattened length differs from `length`
        """
        vec = np.array(seq, dtype=ADConfig.DTYPE).reshape(-1)
        if vec.shape[0] != length:
            raise DimensionMismatch(
                f"{what} vector has length {vec.shape[0]}, expected {length}"
            )
        return vec
