#!/usr/bin/env python3
"""
Beam sampling of a single series. Given the current transition and emission
parameters, these functions draw slice variables for a latent sequence and then
resample the whole latent sequence jointly. Series are independent of each other
within a sweep, so these are plain functions which can be mapped over series.
"""

import typing

import numpy

from . import utils
from .exceptions import DegenerateDistributionError


def sample_slice_variables(
    latent_sequence: typing.Sequence[int], transition_probabilities: numpy.ndarray, rng: numpy.random.Generator
) -> typing.List[float]:
    """Draw the auxiliary beam variables of one series.

    The slice variable at time t is uniform between zero and the probability of the transition into the current
    state; the first state of a series transitions from state 0.

    Args:
        latent_sequence: The current latent state at each time step.
        transition_probabilities: Array with shape (K, K + 1) (reserved column optional).
        rng: The random generator to draw from.

    Returns:
        A slice variable for each time step.
    """
    seqlen = len(latent_sequence)
    if seqlen == 0:
        return []

    previous_states = numpy.concatenate(([0], numpy.asarray(latent_sequence[:-1], dtype=int)))
    transition_likelihoods = transition_probabilities[previous_states, numpy.asarray(latent_sequence, dtype=int)]
    return rng.uniform(0.0, transition_likelihoods).tolist()


def resample_latent_sequence(
    likelihoods: numpy.ndarray,
    slice_variables: typing.Sequence[float],
    transition_probabilities: numpy.ndarray,
    rng: numpy.random.Generator,
) -> typing.List[int]:
    """Resample the latent sequence of one series by forward filtering and backward sampling.

    Only transitions with probability above the slice variable are allowed, which truncates the infinite transition
    matrix to the instantiated states.

    Args:
        likelihoods: Emission likelihood of each observation under each state, shape (T, K).
        slice_variables: The slice variable at each time step.
        transition_probabilities: Transition probabilities between instantiated states, shape (K, K) or (K, K + 1).
        rng: The random generator to draw from.

    Returns:
        A new latent sequence of length T, with states in [0, K).

    Raises:
        DegenerateDistributionError: If no state is reachable at some time step.
    """
    seqlen, k = likelihoods.shape

    # edge case: zero-length sequence
    if seqlen == 0:
        return []

    pi = transition_probabilities[:, :k]
    u = numpy.asarray(slice_variables, dtype=float)

    # forward filter: P(s_t | u_{1:t}, y_{1:t}), normalised at each step to avoid underflow
    p_history = numpy.empty((seqlen, k))
    for t in range(seqlen):
        if t == 0:
            p_temp = likelihoods[0] * (u[0] < pi[0])
        else:
            p_temp = (p_history[t - 1] @ (u[t] < pi)) * likelihoods[t]
        prob_total = p_temp.sum()
        if not prob_total > 0:
            raise DegenerateDistributionError("No latent state has positive probability at time {}.".format(t))
        p_history[t] = p_temp / prob_total

    # sample the final state, then work backwards keeping transitions feasible under the slice variables
    latent_sequence = [0] * seqlen
    latent_sequence[seqlen - 1] = utils.sample_from_likelihoods(p_history[seqlen - 1], rng)
    for t in range(seqlen - 1, 0, -1):
        p_temp = p_history[t - 1] * (u[t] < pi[:, latent_sequence[t]])
        latent_sequence[t - 1] = utils.sample_from_likelihoods(p_temp, rng)

    return latent_sequence


def log_likelihood(
    likelihoods: numpy.ndarray, latent_sequence: typing.Sequence[int], transition_probabilities: numpy.ndarray
) -> float:
    """Log likelihood of one series and its latent sequence, given the parameters.

    Args:
        likelihoods: Emission likelihood of each observation under each state, shape (T, K).
        latent_sequence: The latent state at each time step.
        transition_probabilities: Transition probabilities, row 0 also giving the first state.

    Returns:
        The log likelihood of the series.
    """
    seqlen = len(latent_sequence)
    if seqlen == 0:
        return 0.0

    states = numpy.asarray(latent_sequence, dtype=int)
    previous_states = numpy.concatenate(([0], states[:-1]))
    log_likelihoods = (
        numpy.sum(numpy.log(transition_probabilities[previous_states, states])),
        numpy.sum(numpy.log(likelihoods[numpy.arange(seqlen), states])),
    )
    return float(sum(log_likelihoods))
