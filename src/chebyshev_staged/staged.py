"""Staged evaluation of first integrals of power-law kernels.

The build stage samples the rescaled first integral at Chebyshev nodes in
xi, fits an adaptive-degree Chebyshev series and binds the coefficients
into a :class:`BoundEvaluator`.  The query stage maps X to xi, runs the
Clenshaw recurrence and undoes the singular scaling.  Building is
expensive (one quadrature per node per fitting round); querying costs a
handful of floating point operations per coefficient.

Examples
--------
>>> from chebyshev_staged import build, relaxation_kernel
>>> evaluator = build(relaxation_kernel(), n=1, tol=1e-8)  # doctest: +SKIP
>>> evaluator([0.1, 1.0, 10.0])  # doctest: +SKIP
"""

from __future__ import annotations

from dataclasses import dataclass, field
from numbers import Integral
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from chebyshev_staged.approximation import (
    adaptive_fit,
    eval_chebyshev,
    specialize_chebyshev,
)
from chebyshev_staged.config import DEFAULT_TOL, FitConfig
from chebyshev_staged.errors import UnsupportedKernel
from chebyshev_staged.kernels import FirstIntegral, PowerLawKernel
from chebyshev_staged.logging_config import get_logger
from chebyshev_staged.rescaling import SingularityRescaler

logger = get_logger(__name__)


@dataclass(frozen=True, eq=False)
class BoundEvaluator:
    """A fitted first integral, evaluable at any X > 0.

    Instances are immutable and hold a private read-only copy of their
    coefficients, so one evaluator may be shared freely between threads.

    Parameters
    ----------
    p, q, s : float
        Kernel exponents and crossover scale.
    n : int
        Integral order.
    coefficients : tuple of float
        Chebyshev coefficients of the rescaled integral in xi.
    tol : float
        Tolerance the coefficients were fitted to.
    name : str
        Name of the kernel shape.
    dropped : float
        Sum of the magnitudes of the coefficients removed by truncation.
        The fitted series can be off by this much more than *tol*.
    error_estimate : float
        Estimated error of the series in xi, truncation included; see
        :attr:`~chebyshev_staged.approximation.ChebyshevFit.error_estimate`.
        For p < 0 the error in I_n(X) is this times ``s^p + X^p``.
    """

    p: float
    q: float
    s: float
    n: int
    coefficients: tuple[float, ...]
    tol: float = DEFAULT_TOL
    name: str = "kernel"
    dropped: float = 0.0
    error_estimate: float = 0.0
    _coeffs: NDArray[np.float64] = field(init=False, repr=False)
    _rescaler: SingularityRescaler = field(init=False, repr=False)

    def __post_init__(self) -> None:
        coeffs = np.array(self.coefficients, dtype=np.float64)
        coeffs.flags.writeable = False
        object.__setattr__(self, "coefficients", tuple(coeffs.tolist()))
        object.__setattr__(self, "_coeffs", coeffs)
        object.__setattr__(
            self, "_rescaler", SingularityRescaler(self.p, self.q, self.s)
        )

    @property
    def degree(self) -> int:
        return len(self.coefficients) - 1

    @property
    def rescaler(self) -> SingularityRescaler:
        return self._rescaler

    def _evaluate(
        self,
        clenshaw: Callable[[ArrayLike], NDArray[np.float64]],
        X: ArrayLike,
    ) -> NDArray[np.float64]:
        scalar_input = np.ndim(X) == 0
        X = self._rescaler.check_query(X)
        fitted = clenshaw(self._rescaler.forward(X))
        result = self._rescaler.reconstruct(X, fitted)
        return float(result) if scalar_input else result

    def __call__(self, X: ArrayLike) -> NDArray[np.float64]:
        """Approximate ``I_n(X)``; raises DomainError unless every X > 0."""
        return self._evaluate(lambda xi: eval_chebyshev(self._coeffs, xi), X)

    def specialize(self) -> Callable[[ArrayLike], NDArray[np.float64]]:
        """Return a query function with zero terms of the recurrence resolved up front.

        The result gives the same values as calling the evaluator itself.
        """
        clenshaw = specialize_chebyshev(self._coeffs)

        def evaluate(X: ArrayLike) -> NDArray[np.float64]:
            return self._evaluate(clenshaw, X)

        evaluate.evaluator = self
        return evaluate


def _validate(kernel: PowerLawKernel, n: int) -> None:
    if isinstance(n, bool) or not isinstance(n, Integral) or n < 0:
        raise ValueError(f"integral order n must be a non-negative integer, got {n!r}")
    if not all(np.isfinite(kernel.params)):
        raise ValueError(f"kernel parameters must be finite, got {kernel.params}")
    if kernel.q > 0:
        raise UnsupportedKernel(
            f"unsupported growing kernel {kernel.name}: q={kernel.q} > 0"
        )
    if not kernel.s > 0:
        raise ValueError(f"crossover scale s must be positive, got {kernel.s}")
    if n + kernel.p <= -1:
        raise UnsupportedKernel(
            f"first integral of order {n} diverges at w=0 for p={kernel.p}"
        )


def build(
    kernel: PowerLawKernel,
    n: int,
    tol: float | None = None,
    config: FitConfig | None = None,
) -> BoundEvaluator:
    """Fit the first integral of *kernel* of order *n* and bind it.

    Parameters
    ----------
    kernel : PowerLawKernel
        Kernel to integrate.  Must have q <= 0.
    n : int
        Integral order (non-negative).
    tol : float, optional
        Fitting tolerance; overrides ``config.tol``.
    config : FitConfig, optional
        Tolerances and limits; defaults to :class:`FitConfig()`.

    Returns
    -------
    evaluator : BoundEvaluator

    Raises
    ------
    UnsupportedKernel
        If q > 0 or the integral diverges at w = 0.
    FitDivergence
        If no node count up to ``config.max_nodes`` meets the
        convergence test.
    """
    config = config if config is not None else FitConfig()
    if tol is not None:
        config = config.with_tol(tol)
    _validate(kernel, n)

    integral = FirstIntegral(
        kernel,
        int(n),
        epsabs=config.quad_epsabs,
        epsrel=config.quad_epsrel,
        limit=config.quad_limit,
    )
    rescaler = SingularityRescaler(*kernel.params)

    def target(xi: NDArray[np.float64]) -> NDArray[np.float64]:
        X = rescaler.inverse(xi)
        return rescaler.rescale(X, integral(X))

    logger.info(
        "building %s (p=%g, q=%g, s=%g) n=%d tol=%g",
        kernel.name, kernel.p, kernel.q, kernel.s, n, config.tol,
    )
    fit = adaptive_fit(
        target,
        tol=config.tol,
        initial_nodes=config.initial_nodes,
        max_nodes=config.max_nodes,
    )
    logger.info(
        "built %s n=%d with %d coefficients from %d nodes (dropped %.2e)",
        kernel.name, n, len(fit.coefficients), fit.nodes, fit.dropped,
    )

    return BoundEvaluator(
        p=kernel.p,
        q=kernel.q,
        s=kernel.s,
        n=int(n),
        coefficients=tuple(fit.coefficients.tolist()),
        tol=config.tol,
        name=kernel.name,
        dropped=fit.dropped,
        error_estimate=fit.error_estimate,
    )


def build_specialized(
    kernel: PowerLawKernel,
    n: int,
    tol: float | None = None,
    config: FitConfig | None = None,
) -> Callable[[ArrayLike], NDArray[np.float64]]:
    """Like :func:`build`, but return the coefficient-specialized query function."""
    return build(kernel, n, tol=tol, config=config).specialize()


def evaluate(evaluator: BoundEvaluator, X: ArrayLike) -> NDArray[np.float64]:
    """Evaluate a bound first integral at *X* (every X must be > 0)."""
    return evaluator(X)
