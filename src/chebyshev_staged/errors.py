"""Exceptions raised while building or evaluating staged integrals."""

from __future__ import annotations


class StagedIntegralError(Exception):
    """Base class for all errors raised by :mod:`chebyshev_staged`."""


class UnsupportedKernel(StagedIntegralError, ValueError):
    """The kernel parameters cannot be handled by the staged builder.

    Raised for kernels that grow without bound (``q > 0``) and for
    integral orders at which the first integral diverges at ``w = 0``.
    """


class DomainError(StagedIntegralError, ValueError):
    """An evaluation point lies outside the domain of the evaluator."""


class FitDivergence(StagedIntegralError, RuntimeError):
    """Adaptive Chebyshev fitting failed to meet its convergence test.

    Parameters
    ----------
    message : str
        Human-readable description.
    nodes : int
        Number of Chebyshev nodes used in the last attempted fit.
    """

    def __init__(self, message: str, nodes: int) -> None:
        super().__init__(message)
        self.nodes = nodes
