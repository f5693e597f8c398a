import typing

import numpy
import scipy.stats

from .. import ragged
from . import emission_model


class GammaPoissonFamily(emission_model.EmissionModel):
    def __init__(self, shape: float = 1.0, rate: float = 1.0) -> None:
        """Poisson emission distributions over the non-negative integers, each rate with a Gamma prior.

        Row k of ``value`` holds the single Poisson rate of state k.

        Args:
            shape: Shape parameter of the Gamma prior.
            rate: Rate (inverse scale) parameter of the Gamma prior.

        Raises:
            ValueError: If either prior parameter is not positive.

        """
        super(GammaPoissonFamily, self).__init__()
        if not shape > 0 or not rate > 0:
            raise ValueError("Gamma prior parameters must be positive.")
        self.shape: float = shape
        self.rate: float = rate

    @property
    def labels(self) -> typing.List[str]:
        return ["rate"]

    def validate(self, observations: ragged.RaggedMatrix) -> None:
        for i, sequence in enumerate(observations):
            for t, count in enumerate(sequence):
                if not emission_model.is_integer(count) or count < 0:
                    raise ValueError(
                        "Observation {} at series {}, time {} is not a non-negative integer.".format(count, i, t)
                    )

    def likelihood_matrix(self, sequence: typing.Sequence[int]) -> numpy.ndarray:
        rates = numpy.array([row[0] for row in self.value], dtype=float)
        return scipy.stats.poisson.pmf(numpy.asarray(sequence, dtype=int)[:, None], rates[None, :])

    def add_state(self, rng: numpy.random.Generator, state: typing.Optional[int] = None) -> None:
        row = [float(scipy.stats.gamma.rvs(a=self.shape, scale=1 / self.rate, random_state=rng))]
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
        # sufficient statistics are the total count and number of observations in each state
        totals = numpy.zeros(k)
        sizes = numpy.zeros(k)
        for sequence, states in zip(observations, hidden_states):
            numpy.add.at(totals, numpy.asarray(states, dtype=int), numpy.asarray(sequence, dtype=float))
            numpy.add.at(sizes, numpy.asarray(states, dtype=int), 1)

        value = ragged.RaggedMatrix()
        for state in range(k):
            shape, scale = self.shape + totals[state], 1 / (self.rate + sizes[state])
            value.append([float(scipy.stats.gamma.rvs(a=shape, scale=scale, random_state=rng))])
        self.value = value
        return self.value

    def log_likelihood(self) -> float:
        log_likelihoods = [scipy.stats.gamma.logpdf(row[0], a=self.shape, scale=1 / self.rate) for row in self.value]
        return float(sum(log_likelihoods))
