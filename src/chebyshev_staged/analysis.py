"""Verification helpers.

Compare staged evaluators against direct quadrature at held-out points,
and study how the fitted series length grows as the tolerance tightens.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from chebyshev_staged.approximation import fit_chebyshev
from chebyshev_staged.config import FitConfig
from chebyshev_staged.kernels import FirstIntegral, PowerLawKernel
from chebyshev_staged.staged import BoundEvaluator


@dataclass
class ComparisonResult:
    """Staged values against quadrature at a set of query points."""

    X: NDArray[np.float64]
    true_values: NDArray[np.float64]
    approx_values: NDArray[np.float64]
    pointwise_error: NDArray[np.float64]
    max_error: float
    mean_error: float


def held_out_points(
    num_points: int = 200,
    lo: float = 1e-3,
    hi: float = 1e3,
) -> NDArray[np.float64]:
    """Log-spaced query points in [lo, hi]."""
    if not 0 < lo < hi:
        raise ValueError("Require 0 < lo < hi")
    return np.logspace(np.log10(lo), np.log10(hi), num_points)


def compare_with_quadrature(
    evaluator: BoundEvaluator,
    kernel: PowerLawKernel,
    X: ArrayLike | None = None,
    config: FitConfig | None = None,
) -> ComparisonResult:
    """Compare a bound evaluator with direct quadrature of its integral.

    Parameters
    ----------
    evaluator : BoundEvaluator
        The staged evaluator.
    kernel : PowerLawKernel
        The kernel it was built from.
    X : array_like, optional
        Query points; defaults to :func:`held_out_points`.
    config : FitConfig, optional
        Supplies the quadrature tolerances.

    Returns
    -------
    result : ComparisonResult
    """
    if kernel.params != (evaluator.p, evaluator.q, evaluator.s):
        raise ValueError("kernel does not match the evaluator's parameters")
    config = config if config is not None else FitConfig()
    X = held_out_points() if X is None else np.asarray(X, dtype=np.float64)

    integral = FirstIntegral(
        kernel,
        evaluator.n,
        epsabs=config.quad_epsabs,
        epsrel=config.quad_epsrel,
        limit=config.quad_limit,
    )
    true_vals = np.asarray(integral(X), dtype=np.float64)
    approx_vals = np.asarray(evaluator(X), dtype=np.float64)
    pw_err = np.abs(true_vals - approx_vals)

    return ComparisonResult(
        X=X,
        true_values=true_vals,
        approx_values=approx_vals,
        pointwise_error=pw_err,
        max_error=float(np.max(pw_err)),
        mean_error=float(np.mean(pw_err)),
    )


@dataclass
class ConvergenceResult:
    """Series lengths produced by :func:`fit_chebyshev` at several tolerances."""

    tolerances: list[float]
    lengths: list[int]
    coefficients: list[NDArray[np.float64]] = field(repr=False)


def convergence_study(
    f: Callable[[NDArray[np.float64]], ArrayLike],
    tolerances: list[float] | None = None,
) -> ConvergenceResult:
    """Fit *f* on (-1, 1) at each tolerance and record the series length.

    Defaults to tolerances 1e-2, 1e-4, ..., 1e-12.
    """
    if tolerances is None:
        tolerances = [10.0**-k for k in range(2, 14, 2)]

    lengths: list[int] = []
    all_coeffs: list[NDArray[np.float64]] = []
    for tol in tolerances:
        coeffs = fit_chebyshev(f, tol)
        lengths.append(len(coeffs))
        all_coeffs.append(coeffs)

    return ConvergenceResult(
        tolerances=list(tolerances), lengths=lengths, coefficients=all_coeffs
    )
