"""Thread-safe cache of bound evaluators keyed by kernel shape and order."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Callable, Hashable

from chebyshev_staged.config import FitConfig
from chebyshev_staged.kernels import PowerLawKernel
from chebyshev_staged.logging_config import get_logger
from chebyshev_staged.staged import BoundEvaluator, build

logger = get_logger(__name__)

Builder = Callable[[PowerLawKernel, int, FitConfig], BoundEvaluator]


def _default_builder(
    kernel: PowerLawKernel, n: int, config: FitConfig
) -> BoundEvaluator:
    return build(kernel, n, config=config)


class EvaluatorCache:
    """Cache of :class:`BoundEvaluator` instances.

    Concurrent first use of the same key performs a single build: the
    first caller builds while later callers for that key wait and then
    receive the same evaluator.  Builds for different keys run in
    parallel.  A build that raises is not cached.  The error reaches the
    caller that ran the build; callers that were waiting on the same key
    then run the build themselves, one at a time, and later requests
    retry as well.

    Parameters
    ----------
    config : FitConfig, optional
        Fitting configuration used for every build.
    maxsize : int or None
        Maximum number of evaluators kept; the least recently used one is
        evicted beyond that.  ``None`` means unbounded.
    builder : callable, optional
        ``builder(kernel, n, config) -> BoundEvaluator``; defaults to
        :func:`~chebyshev_staged.staged.build`.
    """

    def __init__(
        self,
        config: FitConfig | None = None,
        maxsize: int | None = None,
        builder: Builder | None = None,
    ) -> None:
        if maxsize is not None and maxsize <= 0:
            raise ValueError("maxsize must be positive or None")
        self.config = config if config is not None else FitConfig()
        self.maxsize = maxsize
        self._builder = builder if builder is not None else _default_builder
        self._data: OrderedDict[Hashable, BoundEvaluator] = OrderedDict()
        self._key_locks: dict[Hashable, threading.Lock] = {}
        self._lock = threading.Lock()

    def key(self, kernel: PowerLawKernel, n: int) -> Hashable:
        return (kernel.name, kernel.p, kernel.q, kernel.s, int(n), self.config.tol)

    def _lookup(self, key: Hashable) -> BoundEvaluator | None:
        with self._lock:
            evaluator = self._data.get(key)
            if evaluator is not None:
                self._data.move_to_end(key)
            return evaluator

    def get(self, kernel: PowerLawKernel, n: int) -> BoundEvaluator:
        """Return the evaluator for ``(kernel, n)``, building it on first use."""
        key = self.key(kernel, n)
        evaluator = self._lookup(key)
        if evaluator is not None:
            return evaluator

        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            evaluator = self._lookup(key)
            if evaluator is not None:
                return evaluator

            logger.debug("cache miss for %s", key)
            # On failure the key lock stays registered so retries serialize.
            evaluator = self._builder(kernel, n, self.config)

            with self._lock:
                self._data[key] = evaluator
                self._key_locks.pop(key, None)
                if self.maxsize is not None and len(self._data) > self.maxsize:
                    evicted, _ = self._data.popitem(last=False)
                    logger.debug("evicted %s", evicted)
            return evaluator

    __call__ = get

    def __contains__(self, item: tuple[PowerLawKernel, int]) -> bool:
        kernel, n = item
        with self._lock:
            return self.key(kernel, n) in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def clear(self) -> None:
        """Drop every cached evaluator."""
        with self._lock:
            self._data.clear()
