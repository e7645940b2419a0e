"""Tests for the kernel definitions and quadrature of first integrals."""

import logging

import numpy as np
import pytest
from scipy.special import exp1

from chebyshev_staged.kernels import (
    FirstIntegral,
    PowerLawKernel,
    broken_power_law,
    power_law_sum,
    relaxation_kernel,
)


class TestBrokenPowerLaw:
    @pytest.mark.parametrize("p,q,s", [(0.0, -1.0, 1.0), (1.0, -1.0, 2.0), (0.5, -2.0, 0.3)])
    def test_asymptotics(self, p, q, s):
        kernel = broken_power_law(p, q, s)
        small, large = 1e-8, 1e8
        assert np.isclose(kernel(small) / (small / s) ** p, 1.0, rtol=1e-5)
        assert np.isclose(kernel(large) / (large / s) ** q, 1.0, rtol=1e-5)

    def test_params(self):
        kernel = broken_power_law(0.0, -1.0, 2.0)
        assert kernel.params == (0.0, -1.0, 2.0)
        assert kernel.name == "broken_power_law"

    def test_invalid(self):
        with pytest.raises(ValueError):
            broken_power_law(-1.0, 0.0)

    def test_first_integral_closed_form(self):
        """K = s/(s+x): I_1(X) = s/X - s^2 log(1+X/s) / X^2."""
        s = 2.0
        integral = FirstIntegral(broken_power_law(0.0, -1.0, s), 1)
        X = np.array([0.5, 1.0, 5.0, 50.0])
        expected = s / X - s**2 * np.log1p(X / s) / X**2
        assert np.allclose(integral(X), expected, rtol=1e-9)


class TestPowerLawSum:
    def test_values(self):
        kernel = power_law_sum(-2.0, -1.0, 2.0)
        x = np.array([0.5, 2.0, 8.0])
        assert np.allclose(kernel(x), (x / 2) ** -2 + (x / 2) ** -1)

    def test_invalid(self):
        with pytest.raises(ValueError):
            power_law_sum(-1.0, -2.0)

    def test_first_integral_closed_form(self):
        p, q, s, n = -2.0, -1.0, 1.5, 2
        integral = FirstIntegral(power_law_sum(p, q, s), n)
        X = np.logspace(-2, 2, 9)
        expected = (X / s) ** p / (n + p + 1) + (X / s) ** q / (n + q + 1)
        assert np.allclose(integral(X), expected, rtol=1e-10)


class TestRelaxationKernel:
    def test_limits(self):
        kernel = relaxation_kernel(1.0)
        assert kernel.params == (0.0, -1.0, 1.0)
        assert np.isclose(kernel(1e-12), 1.0)
        assert np.isclose(kernel(2.0), (1 - np.exp(-2.0)) / 2.0)

    def test_first_integral_closed_form(self):
        """I_0(X) = (E_1(X) + log X + gamma) / X."""
        integral = FirstIntegral(relaxation_kernel(1.0), 0)
        X = np.array([0.5, 2.0, 10.0])
        expected = (exp1(X) + np.log(X) + np.euler_gamma) / X
        assert np.allclose(integral(X), expected, rtol=1e-10)


class TestPowerLawKernel:
    def test_equality_ignores_function_object(self):
        assert broken_power_law(0.0, -1.0, 2.0) == broken_power_law(0.0, -1.0, 2.0)
        assert hash(broken_power_law(0.0, -1.0, 2.0)) == hash(
            broken_power_law(0.0, -1.0, 2.0)
        )

    def test_inequality(self):
        assert broken_power_law(0.0, -1.0, 2.0) != broken_power_law(0.0, -1.0, 3.0)
        assert relaxation_kernel(1.0) != broken_power_law(0.0, -1.0, 1.0)

    def test_call_returns_array(self):
        kernel = PowerLawKernel(1.0, -1.0, 1.0, lambda x: [1.0, 2.0])
        assert kernel(0.0).dtype == np.float64


class TestFirstIntegral:
    def test_scalar_returns_float(self):
        integral = FirstIntegral(relaxation_kernel(), 1)
        assert isinstance(integral(1.0), float)

    def test_shape_preserved(self):
        integral = FirstIntegral(relaxation_kernel(), 1)
        assert integral(np.ones((2, 3))).shape == (2, 3)

    def test_constant_kernel(self):
        kernel = PowerLawKernel(0.0, 0.0, 1.0, np.ones_like)
        assert np.isclose(FirstIntegral(kernel, 3)(7.0), 0.25)

    def test_warns_on_failed_quadrature(self, caplog):
        kernel = PowerLawKernel(-1.0, -1.0, 1.0, lambda x: 1.0 / x)
        integral = FirstIntegral(kernel, 0, limit=3)
        with caplog.at_level(logging.WARNING, logger="chebyshev_staged"):
            integral.integrate(1.0)
        assert any("quadrature" in r.getMessage() for r in caplog.records)
