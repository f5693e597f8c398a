#!/usr/bin/env python3
"""
Statistics primitives used by the beam sampler. Should not be called directly by the
user. Every sampling function takes the random generator it draws from explicitly.
"""
# Support typehinting.
from __future__ import annotations

import math
import typing
import warnings

import numpy
import scipy.stats
import sympy.functions.combinatorial.numbers

from .exceptions import DegenerateDistributionError

# smallest concentration parameter passed to beta and Dirichlet samplers
EPS = 1e-8


# used to ensure all concentration parameters have non-zero values
def max_array(values: typing.Iterable[float], eps: float = EPS) -> numpy.ndarray:
    return numpy.maximum(numpy.asarray(list(values), dtype=float), eps)


def sample_beta(a: float, b: float, rng: numpy.random.Generator) -> float:
    """Draw from a Beta(a, b) distribution.

    Args:
        a: First shape parameter, floored at EPS.
        b: Second shape parameter, floored at EPS.
        rng: The random generator to draw from.

    Returns:
        A value in [0, 1].
    """
    a, b = max_array((a, b))
    return float(scipy.stats.beta.rvs(a=a, b=b, random_state=rng))


def sample_dirichlet(alpha: typing.Iterable[float], rng: numpy.random.Generator) -> numpy.ndarray:
    """Draw a single probability vector from a Dirichlet distribution.

    Args:
        alpha: Concentration parameters, floored at EPS so that zero counts are valid.
        rng: The random generator to draw from.

    Returns:
        A probability vector the same length as alpha.
    """
    return scipy.stats.dirichlet.rvs(alpha=max_array(alpha), size=1, random_state=rng)[0]


def sample_from_likelihoods(weights: typing.Iterable[float], rng: numpy.random.Generator) -> int:
    """Draw an index with probability proportional to its weight.

    Args:
        weights: Non-negative, unnormalised likelihoods.
        rng: The random generator to draw from.

    Returns:
        The sampled index.

    Raises:
        DegenerateDistributionError: If the weights carry no usable probability mass.
    """
    weights = numpy.asarray(weights, dtype=float)
    total = weights.sum()
    if weights.size == 0 or not numpy.isfinite(total) or total <= 0 or numpy.any(weights < 0):
        raise DegenerateDistributionError("Cannot sample from weights with total mass {}.".format(total))
    return int(rng.choice(weights.size, p=weights / total))


def sample_from_scores(scores: typing.Iterable[float], rng: numpy.random.Generator) -> int:
    """Draw an index from unnormalised log probabilities.

    Args:
        scores: Log scores; -inf marks an impossible index.
        rng: The random generator to draw from.

    Returns:
        The sampled index.

    Raises:
        DegenerateDistributionError: If no score is finite.
    """
    scores = numpy.asarray(scores, dtype=float)
    if scores.size == 0 or not numpy.isfinite(scores.max()):
        raise DegenerateDistributionError("Cannot sample from log scores without a finite maximum.")
    return sample_from_likelihoods(numpy.exp(scores - scores.max()), rng)


def next_log_stirling1_row(row: typing.Sequence[float], n: int) -> numpy.ndarray:
    """Advance a row of log Stirling numbers of the first kind from n to n + 1.

    Uses the recurrence c(n + 1, m) = n c(n, m) + c(n, m - 1) in log space.

    Args:
        row: log c(n, m) for m = 1, ..., n.
        n: The row index of `row`.

    Returns:
        log c(n + 1, m) for m = 1, ..., n + 1.
    """
    row = numpy.asarray(row, dtype=float)
    grow = numpy.full(n + 1, -numpy.inf)
    if n > 0:
        grow[:n] = numpy.log(n) + row
    shift = numpy.empty(n + 1)
    shift[0] = 0.0 if n == 0 else -numpy.inf
    shift[1:] = row
    return numpy.logaddexp(grow, shift)


def log_stirling1_row(n: int, exact: bool = False) -> numpy.ndarray:
    """Log magnitudes of the unsigned Stirling numbers of the first kind, s(n, 1..n).

    Args:
        n: The number of elements being permuted.
        exact: If True, evaluates each Stirling number exactly with sympy before taking
            logs. If False (the default), uses the log space recurrence, which is much
            faster for large n.

    Returns:
        An array of length n; entry m - 1 holds log s(n, m).

    Raises:
        ValueError: If n is negative.
    """
    if n < 0:
        raise ValueError("Stirling numbers are defined for non-negative n only.")

    if exact:
        try:
            return numpy.array(
                [
                    math.log(int(sympy.functions.combinatorial.numbers.stirling(n, m, kind=1)))
                    for m in range(1, n + 1)
                ]
            )
        except (RecursionError, OverflowError):
            warnings.warn("Exact Stirling numbers failed for n={}; using log space recurrence.".format(n))

    row = numpy.empty(0)
    for i in range(n):
        row = next_log_stirling1_row(row, i)
    return row


def shrink_probabilities(values: typing.Iterable[float], eps: float = 1e-12) -> numpy.ndarray:
    """Move a probability vector away from the boundary of the simplex.

    Args:
        values: A probability vector, possibly with zero entries.
        eps: Mass added to every entry before renormalising.

    Returns:
        A probability vector with strictly positive entries.
    """
    values = numpy.asarray(list(values), dtype=float) + eps
    return values / values.sum()
