"""Tolerances and limits controlling a staged build."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace

DEFAULT_TOL = 1e-9
DEFAULT_QUAD_EPSABS = 1e-14
DEFAULT_QUAD_EPSREL = 1e-12
DEFAULT_QUAD_LIMIT = 200
DEFAULT_INITIAL_NODES = 10
DEFAULT_MAX_NODES = 10240


@dataclass(frozen=True)
class FitConfig:
    """Configuration for the offline (fitting) stage.

    Attributes
    ----------
    tol : float
        Chebyshev fitting tolerance.  Kept tighter than float32 noise.
    quad_epsabs, quad_epsrel : float
        Absolute and relative tolerances handed to the adaptive
        quadrature.  They must be at least as tight as *tol* so that the
        fitting error dominates.
    quad_limit : int
        Maximum number of quadrature subintervals.
    initial_nodes : int
        Number of Chebyshev nodes of the first fitting attempt.
    max_nodes : int
        Largest node count tried before giving up with
        :class:`~chebyshev_staged.errors.FitDivergence`.
    """

    tol: float = DEFAULT_TOL
    quad_epsabs: float = DEFAULT_QUAD_EPSABS
    quad_epsrel: float = DEFAULT_QUAD_EPSREL
    quad_limit: int = DEFAULT_QUAD_LIMIT
    initial_nodes: int = DEFAULT_INITIAL_NODES
    max_nodes: int = DEFAULT_MAX_NODES

    def __post_init__(self) -> None:
        if not self.tol > 0:
            raise ValueError("tol must be positive")
        if self.quad_epsabs < 0 or self.quad_epsrel < 0:
            raise ValueError("quadrature tolerances must be non-negative")
        if self.quad_epsabs == 0 and self.quad_epsrel == 0:
            raise ValueError("at least one quadrature tolerance must be positive")
        if self.quad_limit < 1:
            raise ValueError("quad_limit must be >= 1")
        if self.initial_nodes < 3:
            raise ValueError("initial_nodes must be >= 3")
        if self.max_nodes < self.initial_nodes:
            raise ValueError("max_nodes must be >= initial_nodes")

    @classmethod
    def from_params(cls, params: dict) -> FitConfig:
        """Create a FitConfig from a params dict (missing keys use defaults)."""
        fit = params.get("fit", params)
        return cls(
            tol=fit.get("tol", DEFAULT_TOL),
            quad_epsabs=fit.get("quad_epsabs", DEFAULT_QUAD_EPSABS),
            quad_epsrel=fit.get("quad_epsrel", DEFAULT_QUAD_EPSREL),
            quad_limit=fit.get("quad_limit", DEFAULT_QUAD_LIMIT),
            initial_nodes=fit.get("initial_nodes", DEFAULT_INITIAL_NODES),
            max_nodes=fit.get("max_nodes", DEFAULT_MAX_NODES),
        )

    def to_dict(self) -> dict:
        """Convert to dict for serialization."""
        return asdict(self)

    def with_tol(self, tol: float) -> FitConfig:
        """Return a copy with a different fitting tolerance."""
        return replace(self, tol=tol)
