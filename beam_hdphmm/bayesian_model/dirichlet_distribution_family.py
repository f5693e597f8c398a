import typing

import numpy
import scipy.stats

from .. import ragged, utils
from . import emission_model


class DirichletDistributionFamily(emission_model.EmissionModel):
    def __init__(self, H: typing.Sequence[float]) -> None:
        """Categorical emission distributions over N symbols, each with a Dirichlet(H) prior.

        Row k of ``value`` is the probability that state k emits each of the symbols 0, ..., N - 1.

        Args:
            H: The N positive concentration parameters of the Dirichlet prior. Larger values pull every state's
                emission distribution towards H / sum(H).

        Raises:
            ValueError: If H is empty, or contains non-positive or non-finite values.

        """
        super(DirichletDistributionFamily, self).__init__()

        H = numpy.asarray(H, dtype=float)
        if H.ndim != 1 or H.size == 0:
            raise ValueError("H must be a non-empty vector.")
        if not numpy.all(numpy.isfinite(H)) or numpy.any(H <= 0):
            raise ValueError("All values of H must be positive and finite.")
        self.H: numpy.ndarray = H

    @property
    def n(self) -> int:
        """Number of emission symbols.

        Returns:
            The length of H.
        """
        return len(self.H)

    @property
    def labels(self) -> typing.List[str]:
        return [str(symbol) for symbol in range(self.n)]

    def validate(self, observations: ragged.RaggedMatrix) -> None:
        for i, sequence in enumerate(observations):
            for t, symbol in enumerate(sequence):
                if not emission_model.is_integer(symbol) or not 0 <= symbol < self.n:
                    raise ValueError(
                        "Observation {} at series {}, time {} is not a symbol in [0, {}).".format(symbol, i, t, self.n)
                    )

    def likelihood_matrix(self, sequence: typing.Sequence[int]) -> numpy.ndarray:
        phi = numpy.asarray(list(self.value), dtype=float).reshape(self.k, self.n)
        return phi[:, numpy.asarray(sequence, dtype=int)].T

    def counts(self, observations: ragged.RaggedMatrix, hidden_states: ragged.RaggedMatrix, k: int) -> numpy.ndarray:
        """Count the symbols emitted by each state.

        Args:
            observations: The observed series.
            hidden_states: The latent state of every observation.
            k: The number of instantiated states.

        Returns:
            An integer array with shape (k, N).

        """
        counts = numpy.zeros((k, self.n), dtype=int)
        for sequence, states in zip(observations, hidden_states):
            numpy.add.at(counts, (numpy.asarray(states, dtype=int), numpy.asarray(sequence, dtype=int)), 1)
        return counts

    def add_state(self, rng: numpy.random.Generator, state: typing.Optional[int] = None) -> None:
        row = utils.sample_dirichlet(self.H, rng).tolist()
        if state is None:
            self.value.append(row)
        else:
            self.value[state] = row

    def resample(
        self,
        observations: ragged.RaggedMatrix,
        hidden_states: ragged.RaggedMatrix,
        k: int,
        rng: numpy.random.Generator,
    ) -> ragged.RaggedMatrix:
        """Draw every emission distribution from its Dirichlet posterior, ``H`` plus the emission counts.

        Args:
            observations: The observed series.
            hidden_states: The latent state of every observation.
            k: The number of instantiated states.
            rng: The random generator to draw from.

        Returns:
            The resampled K x N emission probabilities.

        """
        counts = self.counts(observations, hidden_states, k)
        self.value = ragged.RaggedMatrix(
            utils.sample_dirichlet(self.H + counts[state], rng).tolist() for state in range(k)
        )
        return self.value

    def log_likelihood(self) -> float:
        log_likelihoods = [scipy.stats.dirichlet.logpdf(utils.shrink_probabilities(row), self.H) for row in self.value]
        return float(sum(log_likelihoods))
