"""The auxiliary variables are used to capture the conditional dependence of the stick breaking process."""

import typing

import numpy
import scipy.special

from .. import ragged, utils
from . import variable


class LogStirlingCache(object):
    """Rows of log Stirling numbers of the first kind, keyed by the count they were computed for."""

    def __init__(self, exact: bool = False) -> None:
        """Create an empty cache.

        Args:
            exact: If True, rows are evaluated exactly with sympy. If False (the default), rows are built with the log
                space recurrence, starting from the largest cached row below the one requested.

        """
        self.exact: bool = exact
        self._rows: typing.Dict[int, numpy.ndarray] = {0: numpy.empty(0)}

    def __contains__(self, n: int) -> bool:
        return n in self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def __getitem__(self, n: int) -> numpy.ndarray:
        """The row of log Stirling numbers for count n, computed on first request.

        Args:
            n: A non-negative transition count.

        Returns:
            log s(n, m) for m = 1, ..., n.

        """
        if n not in self._rows:
            if self.exact:
                self._rows[n] = utils.log_stirling1_row(n, exact=True)
            else:
                start = max(i for i in self._rows if i < n)
                row = self._rows[start]
                for i in range(start, n):
                    row = utils.next_log_stirling1_row(row, i)
                self._rows[n] = row
        return self._rows[n]

    def clear(self) -> None:
        self._rows = {0: numpy.empty(0)}


class AuxiliaryVariable(variable.Variable):
    def __init__(self, alpha0: float, exact: bool = False) -> None:
        """The auxiliary variables parametrise the posterior distribution of the stick breaking process.

        The 'auxiliary variable' m[i][j] counts the number of distinct top-level draws behind the transitions from
        state i to state j. Transition counts alone are not sufficient for beta under the nested Dirichlet process, but
        given m, beta has a Dirichlet conditional distribution.

        Args:
            alpha0: The concentration of each transition row's Dirichlet process.
            exact: Passed to the LogStirlingCache.

        """
        super(AuxiliaryVariable, self).__init__()
        self.alpha0: float = alpha0
        self.cache: LogStirlingCache = LogStirlingCache(exact=exact)

        # fill with empty initial value
        self.value: ragged.RaggedMatrix = ragged.RaggedMatrix()

    @staticmethod
    def single_variable_resample(
        scale: float, count: int, log_stirling_row: typing.Sequence[float], rng: numpy.random.Generator
    ) -> int:
        """Sample a single auxiliary variable from its conditional distribution.

        The probability of value m is proportional to s(count, m) * scale ** m for m = 1, ..., count.

        Args:
            scale: Equal to alpha0 * beta for the destination state.
            count: The number of observed transitions between the two states.
            log_stirling_row: log s(count, m) for m = 1, ..., count.
            rng: The random generator to draw from.

        Returns:
            An auxiliary variable; zero if there are no transitions.

        """
        if count <= 0:
            return 0

        values = numpy.arange(1, count + 1)
        scores = numpy.asarray(log_stirling_row) + values * numpy.log(utils.max_array([scale])[0])
        return utils.sample_from_scores(scores, rng) + 1

    def resample(
        self, counts: ragged.RaggedMatrix, beta: typing.Sequence[float], rng: numpy.random.Generator
    ) -> ragged.RaggedMatrix:
        """Fill the value attribute with new values according to the conditional distribution.

        Args:
            counts: The K x K transition counts between states for the current latent sequences.
            beta: The K + 1 stick lengths of the top-level process.
            rng: The random generator to draw from.

        Returns:
            The resampled value.

        """
        value = ragged.RaggedMatrix.uniform(len(counts), len(counts), fill=0)
        for i, row in enumerate(counts):
            for j, count in enumerate(row):
                value[i][j] = self.single_variable_resample(
                    scale=self.alpha0 * beta[j], count=count, log_stirling_row=self.cache[count], rng=rng
                )
        self.value = value
        return self.value

    def log_likelihood(self, counts: ragged.RaggedMatrix, beta: typing.Sequence[float]) -> float:
        """The log likelihood of the auxiliary variables given the transition counts and beta.

        Given count n and scale s = alpha0 * beta[j], the auxiliary variable has probability
        s(n, m) * s ** m * Gamma(s) / Gamma(s + n).

        Args:
            counts: The K x K transition counts the variables were sampled from.
            beta: The K + 1 stick lengths of the top-level process.

        Returns:
            The log likelihood as a float.

        """
        log_likelihoods = []
        for i, row in enumerate(counts):
            for j, count in enumerate(row):
                if count <= 0:
                    continue
                scale = utils.max_array([self.alpha0 * beta[j]])[0]
                value = self.value[i][j]
                log_likelihoods.append(
                    self.cache[count][value - 1]
                    + value * numpy.log(scale)
                    + scipy.special.gammaln(scale)
                    - scipy.special.gammaln(scale + count)
                )
        return float(sum(log_likelihoods))

    def value_aggregated(self) -> typing.List[int]:
        """The auxiliary variables summed over source states, as required to resample the stick breaking process.

        Returns:
            The column sum of the auxiliary variables for each state.

        """
        return [self.value.column_sum(j) for j in range(len(self.value))]
