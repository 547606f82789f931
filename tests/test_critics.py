# tests/test_critics.py
from __future__ import annotations

import numpy as np
import pytest

from tetris_nac.nac.critics import (
    LSPECritic,
    LSTDCritic,
    LSTDStats,
    RawSampleCritic,
    make_critic,
    merge_stats,
)


def _transitions(n: int, dim: int, seed: int = 0) -> list[tuple[np.ndarray, np.ndarray, float]]:
    rng = np.random.default_rng(seed)
    return [(rng.normal(size=dim), rng.normal(size=dim), float(rng.integers(0, 3))) for _ in range(n)]


def test_lstd_single_update() -> None:
    critic = LSTDCritic(dim=3, gamma=0.9, lam=0.5)
    critic.update(np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]), 2.0)
    stats = critic.export()
    expected_A = np.zeros((3, 3))
    expected_A[0] = [1.0, -0.9, 0.0]
    np.testing.assert_allclose(stats.A, expected_A)
    np.testing.assert_allclose(stats.b, [2.0, 0.0, 0.0])
    np.testing.assert_allclose(stats.z, [1.0, 0.0, 0.0])
    assert stats.steps == 1


def test_lstd_trace_decays_between_updates() -> None:
    critic = LSTDCritic(dim=3, gamma=0.9, lam=0.5)
    e = np.eye(3)
    critic.update(e[0], e[1], 2.0)
    critic.update(e[1], e[2], 1.0)
    stats = critic.export()
    z = np.array([0.45, 1.0, 0.0])
    np.testing.assert_allclose(stats.z, z)
    expected_A = np.outer(e[0], e[0] - 0.9 * e[1]) + np.outer(z, e[1] - 0.9 * e[2])
    np.testing.assert_allclose(stats.A, expected_A)
    np.testing.assert_allclose(stats.b, 2.0 * e[0] + z)


def test_lstd_matches_batch_formula() -> None:
    gamma, lam, dim = 0.95, 0.7, 5
    data = _transitions(40, dim)
    critic = LSTDCritic(dim=dim, gamma=gamma, lam=lam)
    for p0, p1, r in data:
        critic.update(p0, p1, r)

    z = np.zeros(dim)
    A = np.zeros((dim, dim))
    b = np.zeros(dim)
    for p0, p1, r in data:
        z = gamma * lam * z + p0
        A += np.outer(z, p0 - gamma * p1)
        b += z * r
    stats = critic.export()
    np.testing.assert_allclose(stats.A, A)
    np.testing.assert_allclose(stats.b, b)


def test_lstd_corrected_mode_adjusts_gradient_columns_only() -> None:
    gamma, lam, dim, offset = 0.9, 0.8, 4, 2
    data = _transitions(3, dim, seed=1)
    plain = LSTDCritic(dim=dim, gamma=gamma, lam=lam, gradient_offset=offset, variance_reduction="on")
    corrected = LSTDCritic(dim=dim, gamma=gamma, lam=lam, gradient_offset=offset, variance_reduction="corrected")

    correction = np.zeros((dim, dim))
    z = np.zeros(dim)
    for p0, p1, r in data:
        correction[:, offset:] -= gamma * lam * np.outer(z, p0[offset:])
        z = gamma * lam * z + p0
        plain.update(p0, p1, r)
        corrected.update(p0, p1, r)

    diff = corrected.export().A - plain.export().A
    np.testing.assert_allclose(diff, correction)
    np.testing.assert_allclose(diff[:, :offset], 0.0)
    np.testing.assert_allclose(corrected.export().b, plain.export().b)


def test_lspe_statistics() -> None:
    gamma, lam = 0.9, 0.0
    e = np.eye(2)
    critic = LSPECritic(dim=2, gamma=gamma, lam=lam)
    critic.update(e[0], e[1], 1.0)
    critic.update(e[1], e[0], 0.0)
    stats = critic.export()
    np.testing.assert_allclose(stats.B, np.eye(2))
    expected_A = np.outer(e[0], gamma * e[1] - e[0]) + np.outer(e[1], gamma * e[0] - e[1])
    np.testing.assert_allclose(stats.A, expected_A)
    np.testing.assert_allclose(stats.b, [1.0, 0.0])
    assert stats.steps == 2


def test_raw_samples_are_recorded_in_order() -> None:
    data = _transitions(4, 3)
    critic = RawSampleCritic(dim=3, gamma=1.0, lam=0.0)
    for p0, p1, r in data:
        critic.update(p0, p1, r)
    stats = critic.export()
    assert stats.n == 4
    np.testing.assert_array_equal(stats.s0, np.vstack([d[0] for d in data]))
    np.testing.assert_array_equal(stats.s1, np.vstack([d[1] for d in data]))
    np.testing.assert_array_equal(stats.r, [d[2] for d in data])


def test_raw_sample_capacity_is_enforced() -> None:
    critic = RawSampleCritic(dim=2, gamma=1.0, lam=0.0, max_samples=2)
    critic.update(np.ones(2), np.ones(2), 0.0)
    critic.update(np.ones(2), np.ones(2), 0.0)
    with pytest.raises(RuntimeError, match="capacity exceeded"):
        critic.update(np.ones(2), np.ones(2), 0.0)
    assert critic.export().n == 2


def test_empty_raw_export_has_right_shapes() -> None:
    stats = RawSampleCritic(dim=5, gamma=1.0, lam=0.0).export()
    assert stats.n == 0
    assert stats.s0.shape == (0, 5)
    assert stats.r.shape == (0,)


def test_feature_shape_is_checked() -> None:
    critic = LSTDCritic(dim=3, gamma=1.0, lam=0.0)
    with pytest.raises(ValueError, match="phi1 must have shape"):
        critic.update(np.zeros(3), np.zeros(4), 0.0)


def test_trace_parameters_are_checked() -> None:
    with pytest.raises(ValueError, match="gamma"):
        LSPECritic(dim=2, gamma=1.5, lam=0.0)
    with pytest.raises(ValueError, match="lambda"):
        LSTDCritic(dim=2, gamma=1.0, lam=-0.1)


def test_make_critic_dispatches_on_kind() -> None:
    assert isinstance(make_critic("lstd", dim=3, gamma=1.0, lam=0.0), LSTDCritic)
    assert isinstance(make_critic("LSPE", dim=3, gamma=1.0, lam=0.0), LSPECritic)
    raw = make_critic("raw", dim=3, gamma=1.0, lam=0.0, max_samples=10)
    assert isinstance(raw, RawSampleCritic)
    assert raw.max_samples == 10


def test_make_critic_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError, match="unknown critic kind"):
        make_critic("td0", dim=3, gamma=1.0, lam=0.0)


@pytest.mark.parametrize("kind", ["lspe", "raw"])
def test_corrected_mode_requires_lstd(kind: str) -> None:
    with pytest.raises(ValueError, match="corrected"):
        make_critic(kind, dim=3, gamma=1.0, lam=0.0, variance_reduction="corrected")


def test_merging_replays_adds_statistics() -> None:
    data = _transitions(10, 4)
    merged = None
    for _ in range(3):
        critic = LSTDCritic(dim=4, gamma=0.9, lam=0.6)
        for p0, p1, r in data:
            critic.update(p0, p1, r)
        single = critic.export()
        merged = merge_stats(merged, single)
    assert isinstance(merged, LSTDStats)
    np.testing.assert_allclose(merged.A, 3.0 * single.A)
    np.testing.assert_allclose(merged.b, 3.0 * single.b)
    assert merged.steps == 30


def test_merging_raw_samples_concatenates() -> None:
    a = RawSampleCritic(dim=2, gamma=1.0, lam=0.0)
    b = RawSampleCritic(dim=2, gamma=1.0, lam=0.0)
    a.update(np.ones(2), np.zeros(2), 1.0)
    b.update(np.zeros(2), np.ones(2), 2.0)
    b.update(np.zeros(2), np.ones(2), 3.0)
    merged = merge_stats(a.export(), b.export())
    assert merged.n == 3
    np.testing.assert_array_equal(merged.r, [1.0, 2.0, 3.0])


def test_merging_different_kinds_fails() -> None:
    a = LSTDCritic(dim=2, gamma=1.0, lam=0.0).export()
    b = LSPECritic(dim=2, gamma=1.0, lam=0.0).export()
    with pytest.raises(TypeError, match="cannot merge"):
        merge_stats(a, b)


@pytest.mark.parametrize("kind", ["lstd", "lspe"])
def test_repeated_transition_grows_linearly_once_trace_settles(kind: str) -> None:
    gamma, lam, dim = 0.9, 0.5, 4
    (p0, p1, r), = _transitions(1, dim, seed=3)
    critic = make_critic(kind, dim=dim, gamma=gamma, lam=lam)
    history = []
    for _ in range(60):
        critic.update(p0, p1, r)
        history.append(critic.export())

    np.testing.assert_allclose(history[-1].z, p0 / (1.0 - gamma * lam), rtol=1e-12)
    names = ["A", "b", "B"] if kind == "lspe" else ["A", "b"]
    for name in names:
        step_a = getattr(history[-1], name) - getattr(history[-2], name)
        step_b = getattr(history[-2], name) - getattr(history[-3], name)
        np.testing.assert_allclose(step_a, step_b, rtol=1e-12, atol=1e-12)


@pytest.mark.parametrize("kind", ["lstd", "lspe"])
def test_repeated_transition_without_trace_decay_is_exactly_linear(kind: str) -> None:
    (p0, p1, r), = _transitions(1, 3, seed=5)
    critic = make_critic(kind, dim=3, gamma=0.9, lam=0.0)
    critic.update(p0, p1, r)
    first = critic.export()
    for _ in range(6):
        critic.update(p0, p1, r)
    seventh = critic.export()

    np.testing.assert_allclose(seventh.A, 7.0 * first.A)
    np.testing.assert_allclose(seventh.b, 7.0 * first.b)
    if kind == "lspe":
        np.testing.assert_allclose(seventh.B, 7.0 * first.B)
    assert seventh.steps == 7


def test_corrected_mode_needs_gradient_offset() -> None:
    with pytest.raises(ValueError, match="gradient_offset > 0"):
        LSTDCritic(dim=4, gamma=1.0, lam=0.5, variance_reduction="corrected")
    with pytest.raises(ValueError, match="gradient_offset > 0"):
        make_critic("lstd", dim=4, gamma=1.0, lam=0.5, variance_reduction="corrected")
    critic = make_critic("lstd", dim=4, gamma=1.0, lam=0.5, gradient_offset=2, variance_reduction="corrected")
    assert isinstance(critic, LSTDCritic)


def test_merging_raw_samples_keeps_episode_starts() -> None:
    merged = None
    for length in (3, 0, 2, 4):
        critic = RawSampleCritic(dim=2, gamma=1.0, lam=0.5)
        for p0, p1, r in _transitions(length, 2):
            critic.update(p0, p1, r)
        merged = merge_stats(merged, critic.export())
    assert merged.n == 9
    np.testing.assert_array_equal(merged.episode_starts, [0, 3, 5])
    assert merged.episodes() == [slice(0, 3), slice(3, 5), slice(5, 9)]
