"""Tests for the escape-time divergence engine."""

import math

import numpy as np
import pytest

from mandelscope.core.complex import Complex
from mandelscope.core.divergence import (
    BOUNDED,
    Bounded,
    DivergenceEngine,
    Escaped,
    smooth_score,
)
from mandelscope.errors import ConfigurationError


class TestDivergence:
    def test_origin_is_bounded(self, engine):
        assert engine.divergence(Complex(0.0, 0.0)) is BOUNDED

    @pytest.mark.parametrize("max_iter", [1, 10, 100, 1000])
    def test_far_points_escape_quickly(self, max_iter):
        engine = DivergenceEngine(max_iter=max_iter)
        for c in (Complex(3.0, 0.0), Complex(-2.5, 0.1), Complex(1.5, 1.5), Complex(0.0, -2.01)):
            result = engine.divergence(c)
            assert isinstance(result, Escaped)
            assert math.isfinite(result.score)
            assert result.score <= 3.0

    def test_huge_point_has_finite_score(self, engine):
        result = engine.divergence(Complex(1e160, 0.0))
        assert isinstance(result, Escaped)
        assert math.isfinite(result.score)
        assert result.score <= 3.0

    def test_escape_count(self, engine):
        # z: 1, 2, 5 -> escapes on the third step
        result = engine.divergence(Complex(1.0, 0.0))
        assert result.score == pytest.approx(4.0 - math.log2(math.log(5.0)))

    def test_periodic_points_are_bounded(self, engine):
        assert engine.divergence(Complex(-1.0, 0.0)) is BOUNDED
        assert engine.divergence(Complex(0.0, 1.0)) is BOUNDED

    def test_radius_boundary_not_escaped(self, engine):
        # z stays at 2, |z|^2 == 4 is not strictly greater than the radius
        assert engine.divergence(Complex(-2.0, 0.0)) is BOUNDED

    def test_slower_escape_scores_higher(self, engine):
        fast = engine.divergence(Complex(2.5, 0.0))
        slow = engine.divergence(Complex(0.5, 0.0))
        assert isinstance(slow, Escaped)
        assert slow.score > fast.score

    def test_deterministic(self, engine):
        c = Complex(-0.7435, 0.1314)
        assert engine.divergence(c) == engine.divergence(c)

    def test_bounded_is_singleton(self):
        assert Bounded() is BOUNDED
        assert BOUNDED != Escaped(0.0)
        assert repr(BOUNDED) == "BOUNDED"


class TestSmoothScore:
    def test_overflowed_magnitude_stays_finite(self):
        assert math.isfinite(smooth_score(1, float("inf")))

    def test_regular_value(self):
        assert smooth_score(3, 25.0) == pytest.approx(4.0 - math.log2(math.log(5.0)))

    @pytest.mark.parametrize("abs2", [0.0, 0.25, 1.0, 1.0 + 1e-15])
    def test_small_magnitudes_stay_finite(self, abs2):
        assert math.isfinite(smooth_score(5, abs2))


class TestDivergenceField:
    POINTS = [0.0, -1.0, 1j, 1.0, 0.5, -2.5, 2 + 2j, -0.1 + 0.1j, 0.4 + 0.2j, -1.9 + 0.8j]

    def test_matches_scalar(self, engine):
        pts = np.array(self.POINTS, dtype=np.complex128)
        scores, escaped = engine.divergence_field(pts.real, pts.imag)
        for k, p in enumerate(pts):
            result = engine.divergence(Complex(p.real, p.imag))
            if result is BOUNDED:
                assert not escaped[k]
            else:
                assert escaped[k]
                assert scores[k] == pytest.approx(result.score)

    def test_preserves_shape(self, engine):
        re = np.linspace(-2, 1, 12).reshape(3, 4)
        im = np.zeros_like(re)
        scores, escaped = engine.divergence_field(re, im)
        assert scores.shape == (3, 4)
        assert escaped.shape == (3, 4)
        assert escaped.dtype == bool

    def test_bounded_scores_are_zero(self, engine):
        scores, escaped = engine.divergence_field(np.array([0.0, -1.0]), np.array([0.0, 0.0]))
        assert not escaped.any()
        np.testing.assert_array_equal(scores, [0.0, 0.0])

    def test_huge_points_have_finite_scores(self, engine):
        scores, escaped = engine.divergence_field(np.array([1e160, -3e200]), np.array([0.0, 1e180]))
        assert escaped.all()
        assert np.isfinite(scores).all()
        np.testing.assert_allclose(scores[0], engine.divergence(Complex(1e160, 0.0)).score)

    def test_empty_input(self, engine):
        scores, escaped = engine.divergence_field(np.array([]), np.array([]))
        assert scores.size == 0
        assert escaped.size == 0


class TestEngineValidation:
    def test_rejects_zero_iterations(self):
        with pytest.raises(ConfigurationError):
            DivergenceEngine(max_iter=0)

    @pytest.mark.parametrize("radius", [1.0, 0.5, -2.0, float("nan"), float("inf"), 1e200])
    def test_rejects_small_radius(self, radius):
        with pytest.raises(ConfigurationError):
            DivergenceEngine(escape_radius=radius)
