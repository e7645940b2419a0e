"""Core Chebyshev machinery on the canonical interval [-1, 1].

Provides the Chebyshev (first-kind) node set, coefficient extraction by
discrete cosine transform, the adaptive-degree fitter, and two Clenshaw
evaluators: a general array-driven one and one with its zero terms resolved
specialised to a fixed coefficient set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.fft import dct

from chebyshev_staged.config import (
    DEFAULT_INITIAL_NODES,
    DEFAULT_MAX_NODES,
    DEFAULT_TOL,
)
from chebyshev_staged.errors import DomainError, FitDivergence
from chebyshev_staged.logging_config import get_logger

logger = get_logger(__name__)

# Number of highest-order coefficients inspected by the convergence test.
_TAIL = 3


def chebyshev_nodes(n: int) -> NDArray[np.float64]:
    """Compute the *n* Chebyshev nodes of the first kind on (-1, 1).

        x_k = cos(pi * (k + 0.5) / n),  k = 0, ..., n - 1

    Parameters
    ----------
    n : int
        Number of nodes (must be >= 1).

    Returns
    -------
    nodes : ndarray of shape (n,)
        Nodes in descending order.
    """
    if n < 1:
        raise ValueError("n must be >= 1")
    k = np.arange(n)
    return np.cos(np.pi * (k + 0.5) / n)


def chebyshev_coefficients(values: ArrayLike) -> NDArray[np.float64]:
    """Chebyshev coefficients from function values at :func:`chebyshev_nodes`.

    Applies a type-II DCT, which matches the first-kind node set, so that

        c_j = (2/n) * sum_k f(x_k) * cos(pi * j * (k + 0.5) / n)

    with c_0 halved so the reconstruction is simply sum_j c_j T_j(x).

    Parameters
    ----------
    values : array_like of shape (n,)
        Samples ``f(x_k)`` in node order (descending x).

    Returns
    -------
    coeffs : ndarray of shape (n,)
    """
    values = np.asarray(values, dtype=np.float64)
    if values.ndim != 1 or values.size == 0:
        raise ValueError("values must be a non-empty 1-D array")
    coeffs = dct(values, type=2) / values.size
    coeffs[0] /= 2.0
    return coeffs


def _truncate(coeffs: NDArray[np.float64], tol: float) -> NDArray[np.float64]:
    significant = np.flatnonzero(np.abs(coeffs) > tol)
    if significant.size == 0:
        return coeffs[:1].copy()
    return coeffs[: significant[-1] + 1].copy()


def _converged(coeffs: NDArray[np.float64], tol: float) -> tuple[bool, float]:
    magnitudes = np.abs(coeffs)
    scale = float(np.max(magnitudes))
    tail = float(np.max(magnitudes[-_TAIL:]))
    # <= so that an identically zero sample set passes with tail == scale == 0.
    return tail <= tol * scale, tail


@dataclass(frozen=True, eq=False)
class ChebyshevFit:
    """Outcome of :func:`adaptive_fit`.

    Attributes
    ----------
    coefficients : ndarray
        Truncated Chebyshev coefficients (c_0 already halved).
    nodes : int
        Node count of the accepted fit.
    tail : float
        Largest magnitude among the three highest-order coefficients of
        the accepted fit.
    dropped : float
        Sum of the magnitudes of the coefficients removed by truncation.
    """

    coefficients: NDArray[np.float64] = field(repr=False)
    nodes: int
    tail: float
    dropped: float

    @property
    def error_estimate(self) -> float:
        """Estimated sup-norm error of the truncated series on [-1, 1].

        Truncation contributes at most ``dropped``.  The unresolved
        terms beyond the last node are bounded by ``nodes * tail`` as long
        as the coefficients decay at least like k^-2.
        """
        return self.dropped + self.nodes * self.tail


def adaptive_fit(
    f: Callable[[NDArray[np.float64]], ArrayLike],
    tol: float = DEFAULT_TOL,
    initial_nodes: int = DEFAULT_INITIAL_NODES,
    max_nodes: int = DEFAULT_MAX_NODES,
) -> ChebyshevFit:
    """Fit the shortest Chebyshev series reproducing *f* on (-1, 1) to *tol*.

    Starting from *initial_nodes* nodes, *f* is sampled at the Chebyshev
    nodes and transformed to coefficients.  The fit is accepted once the
    three highest-order coefficients are all at most ``tol`` times the
    largest coefficient (equality passes, so the zero function is
    accepted); otherwise the node count is doubled and the fit redone
    from scratch.  The accepted series is truncated after the last
    coefficient whose magnitude exceeds *tol*.

    Because the truncation threshold is absolute, the truncated series
    can differ from *f* by more than *tol*: by up to the sum of the
    dropped coefficients, reported as :attr:`ChebyshevFit.dropped`.

    Parameters
    ----------
    f : callable
        Function to approximate.  Must accept an ndarray of points in
        (-1, 1) and return an array of the same shape.
    tol : float
        Target tolerance.
    initial_nodes : int
        Node count of the first attempt.
    max_nodes : int
        Node counts above this are not tried.

    Returns
    -------
    fit : ChebyshevFit

    Raises
    ------
    FitDivergence
        If doubling the node count beyond *max_nodes* would be needed, or
        if *f* returns non-finite values.
    """
    if not tol > 0:
        raise ValueError("tol must be positive")
    if initial_nodes < _TAIL:
        raise ValueError(f"initial_nodes must be >= {_TAIL}")

    n = initial_nodes
    while True:
        nodes = chebyshev_nodes(n)
        values = np.asarray(f(nodes), dtype=np.float64)
        if values.shape != nodes.shape:
            raise ValueError(
                f"f returned shape {values.shape}, expected {nodes.shape}"
            )
        if not np.all(np.isfinite(values)):
            raise FitDivergence(
                f"non-finite function values at n={n} nodes", nodes=n
            )

        coeffs = chebyshev_coefficients(values)
        accepted, tail = _converged(coeffs, tol)
        logger.debug("fit n=%d tail=%.3e accepted=%s", n, tail, accepted)
        if accepted:
            kept = _truncate(coeffs, tol)
            dropped = float(np.sum(np.abs(coeffs[len(kept):])))
            return ChebyshevFit(kept, nodes=n, tail=tail, dropped=dropped)

        if 2 * n > max_nodes:
            raise FitDivergence(
                f"Chebyshev fit did not converge to tol={tol:g} "
                f"within {max_nodes} nodes (last tried n={n})",
                nodes=n,
            )
        n *= 2


def fit_chebyshev(
    f: Callable[[NDArray[np.float64]], ArrayLike],
    tol: float = DEFAULT_TOL,
    initial_nodes: int = DEFAULT_INITIAL_NODES,
    max_nodes: int = DEFAULT_MAX_NODES,
) -> NDArray[np.float64]:
    """Coefficients of :func:`adaptive_fit`; see there for the procedure."""
    return adaptive_fit(f, tol, initial_nodes, max_nodes).coefficients


def _as_domain_array(x: ArrayLike) -> tuple[NDArray[np.float64], bool]:
    x = np.asarray(x, dtype=np.float64)
    scalar_input = x.ndim == 0
    x = np.atleast_1d(x)
    # Written so that nan also fails.
    if not np.all(np.abs(x) <= 1.0):
        raise DomainError("Chebyshev series evaluated outside [-1, 1]")
    return x, scalar_input


def eval_chebyshev(coeffs: ArrayLike, x: ArrayLike) -> NDArray[np.float64]:
    """Evaluate a Chebyshev series at points in [-1, 1].

    Uses the Clenshaw recurrence

        b_k = c_k + 2 x b_{k+1} - b_{k+2},   k = n-1, ..., 1

    and returns ``c_0 + x b_1 - b_2``.

    Parameters
    ----------
    coeffs : array_like
        Chebyshev coefficients (c_0 already halved).
    x : array_like
        Evaluation point(s).

    Returns
    -------
    result : float or ndarray
        A float for scalar *x*, otherwise an array of the same shape.

    Raises
    ------
    DomainError
        If any point lies outside [-1, 1].
    """
    x, scalar_input = _as_domain_array(x)
    coeffs = np.asarray(coeffs, dtype=np.float64)

    n = len(coeffs)
    if n == 0:
        result = np.zeros_like(x)
    elif n == 1:
        result = np.full_like(x, coeffs[0])
    else:
        b_prev = np.zeros_like(x)  # b_{k+2}
        b_curr = np.zeros_like(x)  # b_{k+1}
        for j in range(n - 1, 0, -1):
            b_next = coeffs[j] + 2.0 * x * b_curr - b_prev
            b_prev = b_curr
            b_curr = b_next
        result = coeffs[0] + x * b_curr - b_prev

    return float(result[0]) if scalar_input else result


def _clenshaw_plan(
    coeffs: list[float],
) -> tuple[tuple[float | None, ...], float | None]:
    """Recurrence steps for k = n-1, ..., 1 and the final c_0, zeros as None."""
    steps = tuple(c if c != 0.0 else None for c in reversed(coeffs[1:]))
    first = coeffs[0] if coeffs and coeffs[0] != 0.0 else None
    return steps, first


def _step(c, scaled, previous):
    """``c + scaled - previous`` with None operands left out."""
    value = c
    if scaled is not None:
        value = scaled if value is None else value + scaled
    if previous is not None:
        value = -previous if value is None else value - previous
    return value


def specialize_chebyshev(
    coeffs: ArrayLike,
) -> Callable[[ArrayLike], NDArray[np.float64]]:
    """Build an evaluator bound to a fixed coefficient set.

    Zero coefficients and the zero start-up terms of the Clenshaw
    recurrence are resolved once, here, and skipped at evaluation time.
    The returned function has the same contract as
    ``eval_chebyshev(coeffs, x)``: it accepts scalars or arrays, raises
    :class:`DomainError` outside [-1, 1], and performs the same floating
    point operations in the same order, so both give identical results.

    The precomputed plan is available as the ``steps`` (c_{n-1} down to
    c_1) and ``first`` (c_0) attributes of the returned function, with
    zero coefficients stored as None.
    """
    values = [float(c) for c in np.asarray(coeffs, dtype=np.float64).ravel()]
    if not all(np.isfinite(values)):
        raise ValueError("coefficients must be finite")
    steps, first = _clenshaw_plan(values)

    def clenshaw(x):
        t = 2.0 * x
        # b_{k+1} and b_{k+2}; None marks a term known to be zero.
        b1 = b2 = None
        for c in steps:
            b1, b2 = _step(c, None if b1 is None else t * b1, b2), b1
        return _step(first, None if b1 is None else x * b1, b2)

    def evaluate(x: ArrayLike) -> NDArray[np.float64]:
        x, scalar_input = _as_domain_array(x)
        result = clenshaw(x)
        if result is None:
            result = 0.0
        if np.ndim(result) == 0:
            result = np.full_like(x, result)
        return float(result[0]) if scalar_input else result

    evaluate.steps = steps
    evaluate.first = first
    evaluate.coefficients = tuple(values)
    return evaluate
