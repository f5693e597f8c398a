import typing

import numpy
import scipy.stats

from .. import ragged, utils
from . import variable


class DirichletProcessFamily(variable.Variable):
    def __init__(self, alpha0: float) -> None:
        """The Dirichlet process family gives the (infinite) transition probabilities of the hidden Markov model.

        Each row is a Dirichlet process sharing the stick breaking process beta as its base measure. Only the
        instantiated states are stored: row i has K + 1 entries, where the last entry is the probability reserved for
        every state which has not been instantiated yet. Row 0 also serves as the distribution of the first state of
        every series, so the first state of a series counts as a transition from state 0.

        Args:
            alpha0: The concentration of each row's Dirichlet process.

        """
        super(DirichletProcessFamily, self).__init__()
        self.alpha0: float = alpha0

        # fill with empty initial value
        self.value: ragged.RaggedMatrix = ragged.RaggedMatrix()

        # largest reserved (or newly broken) probability over all rows
        self.max_reserved: float = 0.0

    def posterior_parameters(
        self,
        i: int,
        beta: typing.Sequence[float],
        counts: typing.Optional[ragged.RaggedMatrix] = None,
    ) -> numpy.ndarray:
        """The parameters of the posterior distribution of row i.

        Args:
            i: The row of interest.
            beta: The K + 1 stick lengths of the top-level process.
            counts: The K x K transition counts. Rows beyond the counts are treated as unobserved.

        Returns:
            The K + 1 Dirichlet concentration parameters.

        """
        k = len(beta) - 1
        parameters = self.alpha0 * numpy.asarray(beta, dtype=float)
        if counts is not None and i < len(counts):
            parameters[:k] += numpy.asarray(counts[i], dtype=float)
        return parameters

    def resample_row(
        self,
        i: int,
        beta: typing.Sequence[float],
        rng: numpy.random.Generator,
        counts: typing.Optional[ragged.RaggedMatrix] = None,
    ) -> typing.List[float]:
        """Draw a new transition row from its posterior distribution.

        Args:
            i: The row to resample. If i equals the number of rows, a new row is appended.
            beta: The K + 1 stick lengths of the top-level process.
            rng: The random generator to draw from.
            counts: The K x K transition counts.

        Returns:
            The new row.

        """
        new_pi = utils.sample_dirichlet(self.posterior_parameters(i, beta, counts), rng)
        row = [float(new_pi[j]) for j in range(len(beta))]
        if i == len(self.value):
            self.value.append(row)
        else:
            self.value[i] = row
        self.max_reserved = max(self.max_reserved, row[-1])
        return row

    def resample(
        self,
        beta: typing.Sequence[float],
        rng: numpy.random.Generator,
        counts: typing.Optional[ragged.RaggedMatrix] = None,
    ) -> ragged.RaggedMatrix:
        """Repopulate every transition row with new samples.

        Args:
            beta: The K + 1 stick lengths of the top-level process.
            rng: The random generator to draw from.
            counts: The K x K transition counts of the latent series.

        Returns:
            The resampled value.

        """
        self.max_reserved = 0.0
        for i in range(self.k):
            self.resample_row(i, beta, rng, counts=counts)
        return self.value

    def add_state(
        self, beta: typing.Sequence[float], rng: numpy.random.Generator, state: typing.Optional[int] = None
    ) -> None:
        """Break the reserved probability of every row into a new state and a new reserved probability.

        The stick breaking process must already include the new state. When appending, beta has K + 2 entries while
        every row still has K + 1.

        Args:
            beta: The stick lengths of the top-level process, including the new state.
            rng: The random generator to draw from.
            state: A state previously returned to the reserved probability, to be instantiated again. If None, a new
                state is appended.

        """
        if state is None:
            state = len(beta) - 2
            for row in self.value:
                row.append(0.0)
        self.remove_state(state)

        self.max_reserved = 0.0
        for row in self.value:
            remainder = row[-1]
            breakage = utils.sample_beta(self.alpha0 * beta[state], self.alpha0 * beta[-1], rng)
            row[state] = breakage * remainder
            row[-1] = (1.0 - breakage) * remainder
            self.max_reserved = max(self.max_reserved, row[state], row[-1])

    def remove_state(self, state: int) -> None:
        """Return the probability of moving to a state to the reserved probability of every row.

        Args:
            state: The state to empty.

        """
        for row in self.value:
            row[-1] += row[state]
            row[state] = 0.0
        self.max_reserved = max((row[-1] for row in self.value), default=0.0)

    def log_likelihood(self, beta: typing.Sequence[float]) -> float:
        """The unconditional log likelihood of the transition rows.

        This uses the prior distribution only, and ignores the transition counts.

        Args:
            beta: The K + 1 stick lengths of the top-level process.

        Returns:
            The log likelihood as a float (not necessarily negative).

        """
        parameters = utils.max_array(self.alpha0 * numpy.asarray(beta, dtype=float))
        log_likelihoods = [
            scipy.stats.dirichlet.logpdf(utils.shrink_probabilities(row), parameters) for row in self.value
        ]
        return float(sum(log_likelihoods))
