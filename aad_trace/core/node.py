# aad_trace/core/node.py
from dataclasses import dataclass
from typing import Optional, Tuple

@dataclass(frozen=True)
class Entry:
    """
    One record on the trace produced by a primitive operation.

    Attributes
    ----------
    kind : str
        Operation tag (e.g., "add", "mul", "input", "copy").
    operand_slots : Tuple[int, ...]
        Trace indices of the active operands feeding this op (0..2 of them).
        Always strictly smaller than this entry's own index.
    local_partials : Tuple[float, ...]
        ∂out/∂operand for each slot in `operand_slots`, evaluated at the
        recorded point.
    value : float
        Payload computed while recording.
    immediates : Tuple[Optional[float], ...]
        Full argument layout of the op: None means "next operand slot",
        a float is a folded constant (zero-derivative immediate).
    """
    kind: str
    operand_slots: Tuple[int, ...]
    local_partials: Tuple[float, ...]
    value: float
    immediates: Tuple[Optional[float], ...] = ()

    def arguments(self, values) -> Tuple[float, ...]:
        """Rebuild the full argument tuple using `values[slot]` for active positions."""
        slots = iter(self.operand_slots)
        return tuple(values[next(slots)] if c is None else c for c in self.immediates)
