"""Staged Chebyshev evaluation of power-law kernel integrals."""

from chebyshev_staged.approximation import (
    ChebyshevFit,
    adaptive_fit,
    chebyshev_coefficients,
    chebyshev_nodes,
    eval_chebyshev,
    fit_chebyshev,
    specialize_chebyshev,
)
from chebyshev_staged.cache import EvaluatorCache
from chebyshev_staged.config import FitConfig
from chebyshev_staged.errors import (
    DomainError,
    FitDivergence,
    StagedIntegralError,
    UnsupportedKernel,
)
from chebyshev_staged.kernels import (
    FirstIntegral,
    PowerLawKernel,
    broken_power_law,
    power_law_sum,
    relaxation_kernel,
)
from chebyshev_staged.rescaling import SingularityRescaler
from chebyshev_staged.staged import (
    BoundEvaluator,
    build,
    build_specialized,
    evaluate,
)

__all__ = [
    "chebyshev_nodes",
    "chebyshev_coefficients",
    "ChebyshevFit",
    "adaptive_fit",
    "fit_chebyshev",
    "eval_chebyshev",
    "specialize_chebyshev",
    "SingularityRescaler",
    "PowerLawKernel",
    "FirstIntegral",
    "broken_power_law",
    "power_law_sum",
    "relaxation_kernel",
    "BoundEvaluator",
    "build",
    "build_specialized",
    "evaluate",
    "EvaluatorCache",
    "FitConfig",
    "StagedIntegralError",
    "UnsupportedKernel",
    "DomainError",
    "FitDivergence",
]
