import numpy
import pytest

import beam_hdphmm
import beam_hdphmm.chain


def test_empty_chain() -> None:
    rng = numpy.random.default_rng(0)
    transitions = numpy.array([[0.5, 0.5]])
    assert beam_hdphmm.chain.sample_slice_variables([], transitions, rng) == []
    assert beam_hdphmm.chain.resample_latent_sequence(numpy.empty((0, 1)), [], transitions, rng) == []
    assert beam_hdphmm.chain.log_likelihood(numpy.empty((0, 1)), [], transitions) == 0.0


def test_slice_variables() -> None:
    rng = numpy.random.default_rng(1)
    transitions = numpy.array([[0.2, 0.7, 0.1], [0.05, 0.9, 0.05]])
    latent_sequence = [1, 1, 0, 1]

    # slice variables lie below the probability of the transition taken (the first from state 0)
    limits = [0.7, 0.9, 0.05, 0.7]
    for _ in range(50):
        slice_variables = beam_hdphmm.chain.sample_slice_variables(latent_sequence, transitions, rng)
        assert len(slice_variables) == len(latent_sequence)
        assert all(0 <= u < limit for u, limit in zip(slice_variables, limits))


def test_chain_resample_transition() -> None:
    """Check that resampled latent sequence conforms to deterministic transition latent structure."""
    rng = numpy.random.default_rng(2)
    k = 8
    seqlen = 50

    # specify deterministic cycle through the states, starting from state 0's row
    eps = 1e-6
    transitions = numpy.full((k, k + 1), eps)
    for i in range(k):
        transitions[i, (i + 1) % k] = 1 - k * eps
    likelihoods = numpy.full((seqlen, k), 0.1)
    latent_sequence_expected = [(t + 1) % k for t in range(seqlen)]

    # start from a random latent sequence; several resampling steps may be required
    latent_sequence = list(rng.integers(0, k, size=seqlen))
    for _ in range(200):
        slice_variables = beam_hdphmm.chain.sample_slice_variables(latent_sequence, transitions, rng)
        latent_sequence = beam_hdphmm.chain.resample_latent_sequence(likelihoods, slice_variables, transitions, rng)
        assert all(0 <= s < k for s in latent_sequence)

    # check that engineered latent structure holds
    assert latent_sequence == latent_sequence_expected


def test_chain_resample_emission() -> None:
    """Check that resampled latent sequence conforms to deterministic emission structure."""
    rng = numpy.random.default_rng(3)
    n = 10
    k = 2 * n

    # only the first n states can emit, each emits a single symbol
    emission_sequence = list(range(n)) * n
    likelihoods = numpy.zeros((len(emission_sequence), k))
    likelihoods[numpy.arange(len(emission_sequence)), emission_sequence] = 1.0
    transitions = numpy.full((k, k + 1), 1 / (k + 1))

    latent_sequence = list(rng.integers(0, k, size=len(emission_sequence)))
    for _ in range(5):
        slice_variables = beam_hdphmm.chain.sample_slice_variables(latent_sequence, transitions, rng)
        latent_sequence = beam_hdphmm.chain.resample_latent_sequence(likelihoods, slice_variables, transitions, rng)

    assert latent_sequence == emission_sequence


def test_slice_variables_restrict_beam() -> None:
    rng = numpy.random.default_rng(4)
    transitions = numpy.array([[0.6, 0.4, 0.0], [0.3, 0.7, 0.0]])
    likelihoods = numpy.ones((3, 2))

    # only one path keeps every transition above its slice variable
    for _ in range(20):
        latent_sequence = beam_hdphmm.chain.resample_latent_sequence(likelihoods, [0.5, 0.35, 0.65], transitions, rng)
        assert latent_sequence == [0, 1, 1]


def test_degenerate_chain() -> None:
    rng = numpy.random.default_rng(5)
    transitions = numpy.array([[0.6, 0.4, 0.0], [0.3, 0.7, 0.0]])

    # no state can emit the observation
    with pytest.raises(beam_hdphmm.DegenerateDistributionError, match="time 1"):
        beam_hdphmm.chain.resample_latent_sequence(
            numpy.array([[1.0, 1.0], [0.0, 0.0]]), [0.1, 0.1], transitions, rng
        )

    # slice variable above every transition probability
    with pytest.raises(beam_hdphmm.DegenerateDistributionError, match="time 0"):
        beam_hdphmm.chain.resample_latent_sequence(numpy.ones((1, 2)), [0.9], transitions, rng)


def test_log_likelihood() -> None:
    transitions = numpy.array([[0.6, 0.3, 0.1], [0.2, 0.7, 0.1]])
    likelihoods = numpy.array([[0.5, 0.1], [0.4, 0.8], [0.9, 0.2]])
    latent_sequence = [1, 1, 0]

    expected = numpy.log(0.3 * 0.7 * 0.2) + numpy.log(0.1 * 0.8 * 0.9)
    assert numpy.isclose(beam_hdphmm.chain.log_likelihood(likelihoods, latent_sequence, transitions), expected)
