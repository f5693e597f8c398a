import numpy

import beam_hdphmm
import beam_hdphmm.utils


def create_family(rows: int = 3, alpha0: float = 1.0, seed: int = 0):
    rng = numpy.random.default_rng(seed)
    beta = list(beam_hdphmm.utils.sample_dirichlet([1.0] * (rows + 1), rng))
    family = beam_hdphmm.DirichletProcessFamily(alpha0=alpha0)
    for i in range(rows):
        family.resample_row(i, beta, rng)
    return family, beta, rng


def test_initialisation() -> None:
    family = beam_hdphmm.DirichletProcessFamily(alpha0=2.0)
    assert family.alpha0 == 2.0
    assert family.k == 0
    assert family.max_reserved == 0.0
    assert family.value == beam_hdphmm.RaggedMatrix()


def test_posterior_parameters() -> None:
    family = beam_hdphmm.DirichletProcessFamily(alpha0=2.0)
    beta = [0.5, 0.25, 0.25]
    counts = beam_hdphmm.RaggedMatrix.from_rows([[1, 2], [3, 4]])

    # counts add to the prior for instantiated states, reserved entry takes the prior only
    assert numpy.allclose(family.posterior_parameters(1, beta, counts), [4.0, 4.5, 0.5])
    assert numpy.allclose(family.posterior_parameters(0, beta, counts), [2.0, 2.5, 0.5])
    assert numpy.allclose(family.posterior_parameters(0, beta), [1.0, 0.5, 0.5])

    # rows without counts use the prior only
    assert numpy.allclose(family.posterior_parameters(2, beta, counts), [1.0, 0.5, 0.5])


def test_resample_row() -> None:
    family, beta, rng = create_family(rows=2)
    assert family.k == 2
    assert family.value.sizes() == [3, 3]

    # row is written column by column from a single draw
    counts = beam_hdphmm.RaggedMatrix.from_rows([[0, 1000], [0, 0]])
    row = family.resample_row(0, beta, rng, counts=counts)
    assert family.value[0] == row
    assert len(set(row)) == 3
    assert row[1] > 0.9
    assert numpy.isclose(sum(row), 1)


def test_resample() -> None:
    family, beta, rng = create_family(rows=3)
    counts = beam_hdphmm.RaggedMatrix.uniform(3, 3, fill=2)
    value = family.resample(beta, rng, counts=counts)

    assert value is family.value
    assert value.sizes() == [4, 4, 4]
    for row in value:
        assert numpy.isclose(sum(row), 1)
        assert all(p >= 0 for p in row)

    # maximum reserved probability is tracked over rows
    assert family.max_reserved == max(row[-1] for row in value)


def test_add_state() -> None:
    family, beta, rng = create_family(rows=3)
    reserved = [row[-1] for row in family.value]

    # beta must be broken before the rows
    remainder = beta[-1]
    beta = beta[:-1] + [0.5 * remainder, 0.5 * remainder]
    family.add_state(beta, rng)

    assert family.value.sizes() == [5, 5, 5]
    for row, previous in zip(family.value, reserved):
        assert numpy.isclose(sum(row), 1)
        assert numpy.isclose(row[-2] + row[-1], previous)
    assert family.max_reserved == max(max(row[-2], row[-1]) for row in family.value)


def test_log_likelihood() -> None:
    family, beta, _ = create_family(rows=3)
    assert numpy.isfinite(family.log_likelihood(beta))

    # rows on the edge of the simplex are shrunk rather than infinitely unlikely
    family.value[0] = [1.0, 0.0, 0.0, 0.0]
    assert numpy.isfinite(family.log_likelihood(beta))


def test_remove_and_reuse_state() -> None:
    family, beta, rng = create_family(rows=3)
    previous = [list(row) for row in family.value]

    # probability of moving to the removed state joins the reserved probability of every row
    family.remove_state(2)
    assert family.value.sizes() == [4, 4, 4]
    for row, old in zip(family.value, previous):
        assert row[2] == 0.0
        assert numpy.isclose(row[-1], old[2] + old[-1])
        assert row[:2] == old[:2]
    assert family.max_reserved == max(row[-1] for row in family.value)

    # reusing the state breaks the reserved probability into it, without growing the rows
    beta = beta[:2] + [0.5 * (beta[2] + beta[3]), 0.5 * (beta[2] + beta[3])]
    reserved = [row[-1] for row in family.value]
    family.add_state(beta, rng, state=2)
    assert family.value.sizes() == [4, 4, 4]
    for row, previous_reserved in zip(family.value, reserved):
        assert numpy.isclose(row[2] + row[-1], previous_reserved)
        assert numpy.isclose(sum(row), 1)
