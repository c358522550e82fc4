# aad_trace/core/tape.py
from __future__ import annotations
import itertools
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Hashable, List, Optional, Tuple

import numpy as np

from ..config import ADConfig
from ..errors import (
    AlreadyRecording,
    IncompleteBinding,
    MalformedTrace,
    RecordingClosed,
)
from .node import Entry

logger = logging.getLogger(__name__)

# session ids of the recordings that are currently open
_open_sessions: Dict[Hashable, "Recording"] = {}
_sessions_lock = threading.Lock()
_anonymous_ids = itertools.count()


class Recording:
    """
    An open recording session: records Entries in forward order.

    Entries are only ever appended; an entry's operand slots always point at
    earlier entries. Obtain one with `open_recording`, finish it with
    `close_recording`, which hands back the immutable `Trace`.
    """

    def __init__(self, session_id: Hashable, n: Optional[int] = None, m: Optional[int] = None):
        self.session_id = session_id
        self.n_declared = n
        self.m_declared = m
        self.entries: List[Entry] = []
        self.independents: List[int] = []
        self.dependents: List[int] = []
        self.closed = False
        self.trace: Optional[Trace] = None
        self.has_arithmetic = False
        self.faults: List[str] = []

    def __repr__(self):
        state = "closed" if self.closed else "recording"
        return f"Recording({self.session_id!r}, {state}, entries={len(self.entries)})"

    def check_open(self):
        if self.closed:
            raise RecordingClosed(f"recording {self.session_id!r} is closed")

    def append(self, entry: Entry) -> int:
        """Append `entry` without protocol checks; returns its trace index."""
        self.check_open()
        k = len(self.entries)
        for s in entry.operand_slots:
            if not 0 <= s < k:
                raise MalformedTrace(
                    f"entry {k} ({entry.kind}) references slot {s}, not an earlier entry"
                )
        self.entries.append(entry)
        return k

    def push_node(self, *, kind: str, operand_slots: Tuple[int, ...],
                  local_partials: Tuple[float, ...], value: float,
                  immediates: Tuple[Optional[float], ...] = ()) -> int:
        """
        Append an arithmetic Entry to the recording.

        Arithmetic before every declared independent is marked is remembered
        and reported on close. Arithmetic between dependent markings is fine.
        """
        self.check_open()
        if self.n_declared is not None and len(self.independents) < self.n_declared:
            self.faults.append(
                f"{kind} recorded after {len(self.independents)} of "
                f"{self.n_declared} independents were marked"
            )
        self.has_arithmetic = True
        return self.append(Entry(kind, operand_slots, local_partials, value, immediates))

    def discard(self):
        """Close without producing a trace and release the session id."""
        self.closed = True
        _release(self)


class Trace:
    """
    Closed, immutable trace of one recording.

    Safe to share between threads: the evaluators only read it and keep
    their tangent/adjoint buffers local to each call.
    """

    def __init__(self, session_id: Hashable, entries, independents, dependents):
        self.session_id = session_id
        self.entries: Tuple[Entry, ...] = tuple(entries)
        self.independents: Tuple[int, ...] = tuple(independents)
        self.dependents: Tuple[int, ...] = tuple(dependents)
        self.values = _frozen([e.value for e in self.entries])
        self.x = _frozen([self.values[i] for i in self.independents])
        self.y = _frozen([self.values[j] for j in self.dependents])

    @property
    def n(self) -> int:
        return len(self.independents)

    @property
    def m(self) -> int:
        return len(self.dependents)

    def __len__(self):
        return len(self.entries)

    def __repr__(self):
        return f"Trace({self.session_id!r}, entries={len(self)}, n={self.n}, m={self.m})"


def _frozen(seq) -> np.ndarray:
    arr = np.array(seq, dtype=ADConfig.DTYPE)
    arr.setflags(write=False)
    return arr


def _release(rec: Recording):
    with _sessions_lock:
        if _open_sessions.get(rec.session_id) is rec:
            del _open_sessions[rec.session_id]


def open_recording(session_id: Optional[Hashable] = None, n: Optional[int] = None,
                   m: Optional[int] = None) -> Recording:
    """
    Open a new recording session.

    Args:
        session_id: any hashable id; a fresh one is generated when omitted.
        n, m: optional declared numbers of independents/dependents. When
              given, close_recording checks them exactly.

    Raises:
        AlreadyRecording: a session with this id is currently open.
    """
    for name, count in (("n", n), ("m", m)):
        if count is not None and count < 1:
            raise ValueError(f"{name} must be positive, got {count}")
    with _sessions_lock:
        if session_id is None:
            session_id = f"anonymous-{next(_anonymous_ids)}"
        if session_id in _open_sessions:
            raise AlreadyRecording(f"recording {session_id!r} is already open")
        rec = Recording(session_id, n, m)
        _open_sessions[session_id] = rec
    logger.debug("opened recording %r (n=%s, m=%s)", session_id, n, m)
    return rec


def close_recording(rec: Recording) -> Trace:
    """
    Close `rec` and return its immutable Trace.

    Raises:
        RecordingClosed: `rec` was already closed.
        IncompleteBinding: fewer independents/dependents than declared (or
            none at all); the recording stays open so binding can be finished.
        MalformedTrace: arithmetic happened before every declared independent
            was marked; the recording is discarded.
    """
    rec.check_open()
    if rec.faults:
        rec.discard()
        more = f" (and {len(rec.faults) - 1} more)" if len(rec.faults) > 1 else ""
        raise MalformedTrace(f"recording {rec.session_id!r}: {rec.faults[0]}{more}")
    n_want = rec.n_declared if rec.n_declared is not None else 1
    m_want = rec.m_declared if rec.m_declared is not None else 1
    if len(rec.independents) < n_want or len(rec.dependents) < m_want:
        raise IncompleteBinding(
            f"recording {rec.session_id!r}: marked {len(rec.independents)} independents "
            f"(need {n_want}) and {len(rec.dependents)} dependents (need {m_want})"
        )

    trace = Trace(rec.session_id, rec.entries, rec.independents, rec.dependents)
    rec.trace = trace
    rec.closed = True
    _release(rec)
    logger.debug("closed recording %r: %d entries, n=%d, m=%d",
                 rec.session_id, len(trace), trace.n, trace.m)
    return trace


@contextmanager
def recording(session_id: Optional[Hashable] = None, n: Optional[int] = None,
              m: Optional[int] = None):
    """
    Context manager around open_recording/close_recording:

        with recording("f", n=2, m=1) as rec:
            x = mark_independent(rec, 0, 1.0)
            ...
        trace = rec.trace

    If the body or the close raises, the recording is discarded and the
    exception propagates.
    """
    rec = open_recording(session_id, n, m)
    try:
        yield rec
        close_recording(rec)
    finally:
        if not rec.closed:
            rec.discard()
