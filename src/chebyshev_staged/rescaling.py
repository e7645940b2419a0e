"""Maps between the query domain X in (0, inf) and the fitting domain (-1, 1).

The first integral of a power-law kernel is awkward to approximate
directly: it diverges like X^p at the origin when p < 0, and the domain
is unbounded.  :class:`SingularityRescaler` compresses X onto

    xi = 1 - (X + 2^(1/q))^q

which sends X -> 0 to xi -> -1 and X -> inf to xi -> 1, and for p < 0
divides out the leading singular behaviour ``s^p + X^p``.  What remains
is bounded and smooth enough for a Chebyshev fit in xi.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from chebyshev_staged.errors import DomainError


@dataclass(frozen=True)
class SingularityRescaler:
    """Forward/inverse domain maps and singular scaling for exponents (p, q, s).

    The rescaler does not validate its parameters; the staged builder
    rejects q > 0 before constructing one.  For q == 0 the map uses the
    exponent -1 in place of q, since 2^(1/q) is undefined there.
    """

    p: float
    q: float
    s: float

    @property
    def map_exponent(self) -> float:
        return self.q if self.q < 0 else -1.0

    @property
    def shift(self) -> float:
        """The offset 2^(1/q) that places X = 0 at xi = -1."""
        return 2.0 ** (1.0 / self.map_exponent)

    @property
    def singular(self) -> bool:
        return self.p < 0

    def forward(self, X: ArrayLike) -> NDArray[np.float64]:
        """xi = 1 - (X + 2^(1/q))^q."""
        X = np.asarray(X, dtype=np.float64)
        xi = 1.0 - (X + self.shift) ** self.map_exponent
        # (2^(1/q))^q may round to slightly above 2 for tiny X.
        return np.clip(xi, -1.0, 1.0)

    def inverse(self, xi: ArrayLike) -> NDArray[np.float64]:
        """chi(xi) = (1 - xi)^(1/q) - 2^(1/q), the sampling abscissa for *xi*."""
        xi = np.asarray(xi, dtype=np.float64)
        return (1.0 - xi) ** (1.0 / self.map_exponent) - self.shift

    def scale(self, X: ArrayLike) -> NDArray[np.float64]:
        """The divisor ``s^p + X^p`` for p < 0, otherwise 1."""
        X = np.asarray(X, dtype=np.float64)
        if not self.singular:
            return np.ones_like(X)
        return self.s**self.p + X**self.p

    def rescale(self, X: ArrayLike, values: ArrayLike) -> NDArray[np.float64]:
        """Turn raw integral values at *X* into the fitted target L(X)."""
        values = np.asarray(values, dtype=np.float64)
        if not self.singular:
            return values
        return values / self.scale(X)

    def reconstruct(self, X: ArrayLike, fitted: ArrayLike) -> NDArray[np.float64]:
        """Turn a fitted value C at *X* back into the integral value."""
        fitted = np.asarray(fitted, dtype=np.float64)
        if not self.singular:
            return fitted
        X = np.asarray(X, dtype=np.float64)
        return fitted * (X**self.p + self.s**self.p)

    @staticmethod
    def check_query(X: ArrayLike) -> NDArray[np.float64]:
        """Return *X* as an array, raising DomainError unless every X > 0."""
        X = np.asarray(X, dtype=np.float64)
        # Written so that nan also fails.
        if not np.all(X > 0):
            raise DomainError("query points X must be > 0")
        return X
