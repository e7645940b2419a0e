"""Power-law kernels and their first integrals.

A kernel is a plain vectorised function ``K(x)`` paired with the three
numbers the staged builder needs: the small-argument exponent *p*, the
large-argument exponent *q* and the crossover scale *s*.  The functions
below are ready-made kernels; any other callable can be wrapped in a
:class:`PowerLawKernel` directly.

The first integral of order *n* is

    I_n(X) = int_0^1 w^n K(w X) dw

and is computed here by adaptive quadrature.  This is the expensive
reference the staged evaluators are fitted against.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.integrate import quad
from scipy.special import exprel

from chebyshev_staged.config import (
    DEFAULT_QUAD_EPSABS,
    DEFAULT_QUAD_EPSREL,
    DEFAULT_QUAD_LIMIT,
)
from chebyshev_staged.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PowerLawKernel:
    """A kernel ``K(x)`` behaving like ``x**p`` for x << s and ``x**q`` for x >> s.

    Equality and hashing only look at ``(name, p, q, s)``, so kernels
    made by the same factory with the same parameters are interchangeable
    as cache keys.

    Parameters
    ----------
    p, q : float
        Small- and large-argument exponents.
    s : float
        Crossover scale.
    func : callable
        ``K(x)`` for x > 0; must accept ndarrays.
    name : str
        Identifies the kernel shape.
    """

    p: float
    q: float
    s: float
    func: Callable[[ArrayLike], ArrayLike] = field(compare=False, repr=False)
    name: str = "kernel"

    def __call__(self, x: ArrayLike) -> NDArray[np.float64]:
        return np.asarray(self.func(x), dtype=np.float64)

    @property
    def params(self) -> tuple[float, float, float]:
        return (self.p, self.q, self.s)


def broken_power_law(p: float, q: float, s: float = 1.0) -> PowerLawKernel:
    """Smoothly broken power law for p > q.

        K(x) = 1 / ((x/s)^-p + (x/s)^-q)
    """
    if not p > q:
        raise ValueError("broken_power_law requires p > q")

    def func(x):
        y = np.asarray(x, dtype=np.float64) / s
        return 1.0 / (y**-p + y**-q)

    return PowerLawKernel(p, q, s, func, name="broken_power_law")


def power_law_sum(p: float, q: float, s: float = 1.0) -> PowerLawKernel:
    """Sum of two power laws for p < q.

        K(x) = (x/s)^p + (x/s)^q

    The first integral has the closed form
    ``(X/s)^p / (n+p+1) + (X/s)^q / (n+q+1)``.
    """
    if not p < q:
        raise ValueError("power_law_sum requires p < q")

    def func(x):
        y = np.asarray(x, dtype=np.float64) / s
        return y**p + y**q

    return PowerLawKernel(p, q, s, func, name="power_law_sum")


def relaxation_kernel(s: float = 1.0) -> PowerLawKernel:
    """Exponential relaxation kernel ``K(x) = (1 - exp(-x/s)) / (x/s)``.

    Equals ``exprel(-x/s)``; tends to 1 as x -> 0 (p = 0) and to s/x as
    x -> infinity (q = -1).
    """

    def func(x):
        return exprel(-np.asarray(x, dtype=np.float64) / s)

    return PowerLawKernel(0.0, -1.0, s, func, name="relaxation")


class FirstIntegral:
    """The first integral ``I_n(X) = int_0^1 w^n K(w X) dw`` of a kernel.

    Parameters
    ----------
    kernel : PowerLawKernel
        The kernel.
    n : int
        Order of the monomial weight.
    epsabs, epsrel : float
        Quadrature tolerances.
    limit : int
        Maximum number of quadrature subintervals.
    """

    def __init__(
        self,
        kernel: PowerLawKernel,
        n: int,
        epsabs: float = DEFAULT_QUAD_EPSABS,
        epsrel: float = DEFAULT_QUAD_EPSREL,
        limit: int = DEFAULT_QUAD_LIMIT,
    ) -> None:
        self.kernel = kernel
        self.n = n
        self.epsabs = epsabs
        self.epsrel = epsrel
        self.limit = limit

    def __repr__(self) -> str:
        return f"FirstIntegral({self.kernel!r}, n={self.n})"

    def _integrand(self, w: float, X: float) -> float:
        return w**self.n * float(self.kernel.func(w * X))

    def integrate(self, X: float) -> float:
        """Adaptive quadrature of the integral at a single point *X*."""
        result = quad(
            self._integrand,
            0.0,
            1.0,
            args=(X,),
            epsabs=self.epsabs,
            epsrel=self.epsrel,
            limit=self.limit,
            full_output=1,
        )
        value, abserr = result[0], result[1]
        if len(result) > 3:
            logger.warning(
                "quadrature for %s at X=%.6g: %s (abserr=%.2e)",
                self, X, result[3].splitlines()[0], abserr,
            )
        return value

    def __call__(self, X: ArrayLike) -> NDArray[np.float64]:
        """Evaluate the integral at one or more points *X*."""
        X = np.asarray(X, dtype=np.float64)
        values = np.array([self.integrate(x) for x in X.ravel()], dtype=np.float64)
        values = values.reshape(X.shape)
        return float(values) if values.ndim == 0 else values
