import threading
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from aad_trace import (
    ADConfig, DimensionMismatch, record, recording, mark_independent, mark_dependent,
    forward_evaluate, reverse_evaluate, zero_order, jacobian, gradient, value,
)
from aad_trace.ops import exp, log, sin, sqrt


def full_forward_gradient(trace):
    return np.array([forward_evaluate(trace, ADConfig.basis(trace.n, i))[0]
                     for i in range(trace.n)])


def test_rational_chain_rule():
    f = lambda xs: xs[0] * xs[1] / (xs[0] + xs[1])
    x, y = 1.5, 2.0
    trace = record(f, [x, y])
    expected = [y**2 / (x + y)**2, x**2 / (x + y)**2]
    assert_allclose(full_forward_gradient(trace), expected, rtol=1e-9)
    assert_allclose(reverse_evaluate(trace, [1.0]), expected, rtol=1e-9)


def test_transcendental_chain_rule():
    f = lambda xs: exp(xs[0]) * sin(xs[1]) + log(xs[0]) * sqrt(xs[1])
    x, y = 0.7, 1.3
    trace = record(f, [x, y])
    expected = [
        np.exp(x) * np.sin(y) + np.sqrt(y) / x,
        np.exp(x) * np.cos(y) + np.log(x) / (2 * np.sqrt(y)),
    ]
    assert_allclose(trace.y[0], np.exp(x) * np.sin(y) + np.log(x) * np.sqrt(y), rtol=1e-12)
    assert_allclose(full_forward_gradient(trace), expected, rtol=1e-9)
    assert_allclose(reverse_evaluate(trace, [1.0]), expected, rtol=1e-9)


def test_power_chain_rule():
    f = lambda xs: xs[0]**3 + 2**xs[1] + xs[0]**xs[1]
    x, y = 1.7, 2.5
    trace = record(f, [x, y])
    expected = [3 * x**2 + y * x**(y - 1), 2**y * np.log(2) + x**y * np.log(x)]
    assert_allclose(reverse_evaluate(trace, [1.0]), expected, rtol=1e-9)


def test_multi_use_accumulates():
    trace = record(lambda xs: xs[0] * xs[0], [3.0])
    assert reverse_evaluate(trace, [1.0])[0] == 6.0
    assert forward_evaluate(trace, [1.0])[0] == 6.0


def test_fan_out_through_intermediate():
    # u feeds two consumers: f = u*u + u with u = x*y
    def f(xs):
        u = xs[0] * xs[1]
        return u * u + u
    x, y = 2.0, 5.0
    trace = record(f, [x, y])
    u = x * y
    assert_allclose(reverse_evaluate(trace, [1.0]), [(2*u + 1) * y, (2*u + 1) * x])


def test_replay_is_deterministic():
    trace = record(lambda xs: exp(xs[0] * xs[1]) / (1 + xs[2] ** 2), [0.3, -1.2, 0.8])
    first_r = reverse_evaluate(trace, [1.0])
    first_f = forward_evaluate(trace, [0.1, 0.2, 0.3])
    for _ in range(3):
        assert_array_equal(reverse_evaluate(trace, [1.0]), first_r)
        assert_array_equal(forward_evaluate(trace, [0.1, 0.2, 0.3]), first_f)


def test_multiple_outputs_with_weights():
    x, y = 2.0, -3.0
    trace = record(lambda xs: [xs[0] * xs[1], xs[0] + xs[1]], [x, y])
    assert trace.m == 2
    assert_allclose(trace.y, [x * y, x + y])
    assert_allclose(reverse_evaluate(trace, [2.0, 3.0]), [2 * y + 3, 2 * x + 3])
    assert_allclose(forward_evaluate(trace, [1.0, 0.0]), [y, 1.0])


def test_same_value_marked_twice():
    def f(xs):
        y = xs[0] * 3.0
        return [y, y]
    trace = record(f, [1.0])
    assert_allclose(reverse_evaluate(trace, [1.0, 1.0]), [6.0])


def test_jacobian_wide_and_tall():
    x, y = 0.5, 2.0
    wide = record(lambda xs: [xs[0] * xs[1], xs[0] - xs[1]], [x, y])
    assert_allclose(jacobian(wide), [[y, x], [1.0, -1.0]])

    tall = record(lambda xs: [xs[0], xs[0] * xs[0], sin(xs[0])], [x])
    assert_allclose(jacobian(tall), [[1.0], [2 * x], [np.cos(x)]])


def test_zero_order_matches_rerecording():
    f = lambda xs: exp(xs[0]) * xs[1] - 4.0 / xs[1]
    trace = record(f, [0.2, 1.5])
    moved = zero_order(trace, [1.1, -0.5])
    fresh = record(f, [1.1, -0.5])
    assert_allclose(moved.values, fresh.values, rtol=1e-14)
    assert_allclose(reverse_evaluate(moved, [1.0]), reverse_evaluate(fresh, [1.0]), rtol=1e-14)
    assert_array_equal(trace.x, [0.2, 1.5])


def test_constant_output_has_zero_gradient():
    with recording(n=1, m=1) as rec:
        mark_independent(rec, 0, 4.0)
        mark_dependent(rec, 0, 7.0)
    assert_array_equal(rec.trace.y, [7.0])
    assert_array_equal(reverse_evaluate(rec.trace, [1.0]), [0.0])
    assert_array_equal(forward_evaluate(rec.trace, [1.0]), [0.0])


def test_non_finite_values_propagate():
    trace = record(lambda xs: log(xs[0]), [-1.0])
    assert np.isnan(trace.y[0])
    assert reverse_evaluate(trace, [1.0])[0] == -1.0
    assert np.isinf(gradient(lambda xs: sqrt(xs[0]), [0.0])[0])
    trace = record(lambda xs: 1.0 / xs[0], [0.0])
    assert np.isinf(trace.y[0])


def test_dimension_mismatch_is_checked_first():
    trace = record(lambda xs: xs[0] * xs[1] * xs[2], [1.0, 2.0, 3.0])
    with pytest.raises(DimensionMismatch):
        forward_evaluate(trace, [1.0, 0.0])
    with pytest.raises(DimensionMismatch):
        reverse_evaluate(trace, [1.0, 1.0])
    with pytest.raises(DimensionMismatch):
        gradient(trace, [1.0])
    with pytest.raises(DimensionMismatch):
        zero_order(trace, [1.0, 2.0, 3.0, 4.0])


def test_gradient_needs_single_output():
    with pytest.raises(DimensionMismatch):
        gradient(lambda xs: [xs[0], xs[1]], [1.0, 2.0])


def test_value_helper():
    seen = []
    def f(xs):
        y = xs[0] * 2
        seen.append((value(y), value(3.5)))
        return y
    record(f, [1.25])
    assert seen == [(2.5, 3.5)]


def test_closed_traces_can_be_swept_from_threads():
    rng = np.random.default_rng(1)
    f = lambda xs: sum(xs[i] * xs[i + 1] for i in range(len(xs) - 1)) * exp(xs[0])
    trace = record(f, rng.normal(size=8))
    assert trace.values.flags.writeable is False

    tangents = [rng.normal(size=8) for _ in range(16)]
    serial = [forward_evaluate(trace, t) for t in tangents]
    with ThreadPoolExecutor(max_workers=4) as pool:
        threaded = list(pool.map(lambda t: forward_evaluate(trace, t), tangents))
    for a, b in zip(serial, threaded):
        assert_array_equal(a, b)


def test_recording_sessions_in_parallel_threads():
    results = {}

    def work(k):
        results[k] = gradient(lambda xs: xs[0] * xs[0] * k, [float(k)])[0]

    threads = [threading.Thread(target=work, args=(k,)) for k in range(1, 9)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results == {k: 2.0 * k * k for k in range(1, 9)}


def test_infinite_partial_modes_agree():
    # d sqrt(y)/dy is infinite at y = 0; the x direction must stay finite
    trace = record(lambda xs: xs[0] + sqrt(xs[1]), [1.0, 0.0])
    fwd = full_forward_gradient(trace)
    rev = reverse_evaluate(trace, [1.0])
    assert fwd[0] == 1.0 and rev[0] == 1.0
    assert np.isinf(fwd[1]) and np.isinf(rev[1])
    assert_array_equal(fwd, rev)


def test_record_accepts_ndarray_outputs():
    x, y = 2.0, 3.0
    trace = record(lambda xs: np.array([xs[0] * xs[1], xs[0] + xs[1]]), [x, y])
    assert trace.m == 2
    assert_allclose(trace.y, [x * y, x + y])
    assert_allclose(jacobian(trace), [[y, x], [1.0, 1.0]])
