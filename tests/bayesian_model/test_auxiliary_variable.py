import numpy

import beam_hdphmm
import beam_hdphmm.utils


def test_initialisation() -> None:
    """Check that auxiliary variables are created correctly."""
    auxiliary_variable = beam_hdphmm.AuxiliaryVariable(alpha0=3.0)

    # initialised correctly
    assert auxiliary_variable.value == beam_hdphmm.RaggedMatrix()
    assert auxiliary_variable.alpha0 == 3.0
    assert isinstance(auxiliary_variable.cache, beam_hdphmm.LogStirlingCache)


def test_cache() -> None:
    cache = beam_hdphmm.LogStirlingCache()
    assert 0 in cache
    assert len(cache) == 1

    # rows are built on request and remembered
    row = cache[12]
    assert 12 in cache
    assert cache[12] is row
    assert numpy.allclose(row, beam_hdphmm.utils.log_stirling1_row(12))

    # lower rows do not need the recurrence from zero, but still agree
    assert numpy.allclose(cache[5], beam_hdphmm.utils.log_stirling1_row(5))
    assert numpy.allclose(cache[20], beam_hdphmm.utils.log_stirling1_row(20))
    assert len(cache) == 4

    cache.clear()
    assert len(cache) == 1


def test_exact_cache() -> None:
    cache = beam_hdphmm.LogStirlingCache(exact=True)
    assert numpy.allclose(numpy.exp(cache[4]), [6, 11, 6, 1])


def test_single_variable_resample() -> None:
    rng = numpy.random.default_rng(0)
    sample_count = 200
    count = 20
    row = beam_hdphmm.utils.log_stirling1_row(count)

    tests = [
        beam_hdphmm.AuxiliaryVariable.single_variable_resample(scale=1.0, count=count, log_stirling_row=row, rng=rng)
        for _ in range(sample_count)
    ]

    # check that results are in correct range
    assert min(tests) >= 1
    assert max(tests) <= count
    assert len(set(tests)) > 1

    # no transitions means no tables
    empty = beam_hdphmm.AuxiliaryVariable.single_variable_resample(
        scale=1.0, count=0, log_stirling_row=[], rng=rng
    )
    assert empty == 0

    # a single transition always has a single table
    single = beam_hdphmm.AuxiliaryVariable.single_variable_resample(
        scale=0.01, count=1, log_stirling_row=[0.0], rng=rng
    )
    assert single == 1


def test_scale_drives_resample() -> None:
    rng = numpy.random.default_rng(5)
    count = 50
    row = beam_hdphmm.utils.log_stirling1_row(count)

    # larger alpha0 * beta means more distinct tables
    small = [
        beam_hdphmm.AuxiliaryVariable.single_variable_resample(scale=0.01, count=count, log_stirling_row=row, rng=rng)
        for _ in range(100)
    ]
    large = [
        beam_hdphmm.AuxiliaryVariable.single_variable_resample(scale=100.0, count=count, log_stirling_row=row, rng=rng)
        for _ in range(100)
    ]
    assert numpy.mean(small) < numpy.mean(large)

    # zero weight states do not break the sampler
    zero = beam_hdphmm.AuxiliaryVariable.single_variable_resample(scale=0.0, count=count, log_stirling_row=row, rng=rng)
    assert 1 <= zero <= count


def test_resample() -> None:
    rng = numpy.random.default_rng(6)
    auxiliary_variable = beam_hdphmm.AuxiliaryVariable(alpha0=2.0)
    counts = beam_hdphmm.RaggedMatrix.from_rows([[0, 5, 1], [3, 0, 0], [7, 2, 30]])
    beta = [0.3, 0.3, 0.2, 0.2]

    value = auxiliary_variable.resample(counts, beta, rng)
    assert value is auxiliary_variable.value
    assert value.sizes() == [3, 3, 3]
    for i in range(3):
        for j in range(3):
            if counts[i][j] == 0:
                assert value[i][j] == 0
            else:
                assert 1 <= value[i][j] <= counts[i][j]

    # the cache is populated with every count seen
    assert all(count in auxiliary_variable.cache for row in counts for count in row)


def test_value_aggregated() -> None:
    auxiliary_variable = beam_hdphmm.AuxiliaryVariable(alpha0=1.0)
    auxiliary_variable.value = beam_hdphmm.RaggedMatrix.from_rows([[1, 0, 2], [0, 0, 1], [3, 1, 0]])

    # aggregation sums over source states
    assert auxiliary_variable.value_aggregated() == [4, 1, 3]


def test_log_likelihood() -> None:
    auxiliary_variable = beam_hdphmm.AuxiliaryVariable(alpha0=2.0)
    counts = beam_hdphmm.RaggedMatrix.from_rows([[4, 0], [0, 0]])
    beta = [0.3, 0.5, 0.2]

    # the conditional distribution of a single variable sums to one over 1..n
    total = 0.0
    for value in range(1, 5):
        auxiliary_variable.value = beam_hdphmm.RaggedMatrix.from_rows([[value, 0], [0, 0]])
        total += numpy.exp(auxiliary_variable.log_likelihood(counts, beta))
    assert numpy.isclose(total, 1.0)
