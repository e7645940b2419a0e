"""Tests for the X <-> xi domain maps and singular scaling."""

import numpy as np
import pytest

from chebyshev_staged.approximation import chebyshev_nodes
from chebyshev_staged.errors import DomainError
from chebyshev_staged.rescaling import SingularityRescaler


@pytest.fixture(params=[-0.5, -1.0, -2.0])
def rescaler(request):
    return SingularityRescaler(p=0.0, q=request.param, s=1.0)


class TestDomainMap:
    def test_maps_into_interval(self, rescaler):
        X = np.logspace(-6, 6, 200)
        xi = rescaler.forward(X)
        assert np.all(xi >= -1)
        assert np.all(xi <= 1)

    def test_monotonic(self, rescaler):
        xi = rescaler.forward(np.logspace(-3, 3, 200))
        assert np.all(np.diff(xi) > 0)

    def test_endpoints(self, rescaler):
        assert np.isclose(rescaler.forward(1e-12), -1.0, atol=1e-9)
        assert rescaler.forward(1e12) > 0.99

    def test_tiny_X_stays_in_interval(self, rescaler):
        assert rescaler.forward(1e-300) >= -1.0

    def test_formula(self):
        r = SingularityRescaler(p=0.0, q=-2.0, s=3.0)
        X = np.array([0.1, 1.0, 7.5])
        expected = 1 - (X + 2 ** (1 / -2.0)) ** -2.0
        assert np.allclose(r.forward(X), expected, rtol=0, atol=1e-15)

    def test_inverse_of_forward(self, rescaler):
        X = np.logspace(-3, 3, 50)
        assert np.allclose(rescaler.inverse(rescaler.forward(X)), X, rtol=1e-8)

    def test_forward_of_inverse(self, rescaler):
        xi = chebyshev_nodes(40)
        assert np.allclose(rescaler.forward(rescaler.inverse(xi)), xi, atol=1e-12)

    def test_inverse_positive_at_nodes(self, rescaler):
        assert np.all(rescaler.inverse(chebyshev_nodes(100)) > 0)

    def test_inverse_at_minus_one(self, rescaler):
        assert np.isclose(rescaler.inverse(-1.0), 0.0, atol=1e-15)

    def test_zero_q_uses_bounded_limit(self):
        r0 = SingularityRescaler(p=1.0, q=0.0, s=1.0)
        r1 = SingularityRescaler(p=1.0, q=-1.0, s=1.0)
        X = np.logspace(-2, 2, 20)
        assert r0.map_exponent == -1.0
        assert np.array_equal(r0.forward(X), r1.forward(X))


class TestSingularScaling:
    def test_scale_for_negative_p(self):
        r = SingularityRescaler(p=-2.0, q=-1.0, s=2.0)
        X = np.array([0.5, 1.0, 4.0])
        assert np.allclose(r.scale(X), 2.0**-2 + X**-2)
        assert r.singular

    def test_no_scaling_for_nonnegative_p(self):
        r = SingularityRescaler(p=0.0, q=-1.0, s=2.0)
        X = np.array([0.5, 1.0, 4.0])
        values = np.array([1.0, 2.0, 3.0])
        assert not r.singular
        assert np.array_equal(r.scale(X), np.ones(3))
        assert np.array_equal(r.rescale(X, values), values)
        assert np.array_equal(r.reconstruct(X, values), values)

    def test_rescale_then_reconstruct(self):
        r = SingularityRescaler(p=-1.5, q=-2.0, s=0.7)
        X = np.logspace(-4, 4, 30)
        values = X**-1.5 + np.sin(X)
        assert np.allclose(r.reconstruct(X, r.rescale(X, values)), values, rtol=1e-14)

    def test_rescaled_target_is_bounded_at_origin(self):
        """A pure X^p singularity becomes bounded after division."""
        r = SingularityRescaler(p=-1.0, q=-1.0, s=1.0)
        X = np.logspace(-12, 0, 20)
        rescaled = r.rescale(X, X**-1.0)
        assert np.all(rescaled <= 1.0)
        assert np.isclose(rescaled[0], 1.0)


class TestCheckQuery:
    @pytest.mark.parametrize("X", [0.0, -1.0, np.nan, -np.inf])
    def test_rejects_non_positive(self, X):
        with pytest.raises(DomainError):
            SingularityRescaler.check_query(X)

    def test_rejects_array_with_zero(self):
        with pytest.raises(DomainError):
            SingularityRescaler.check_query([1.0, 0.0, 2.0])

    def test_accepts_positive(self):
        X = SingularityRescaler.check_query([1e-300, 1.0, np.inf])
        assert X.dtype == np.float64
