"""A stick breaking process implementation of the top-level Dirichlet process."""

import typing

import numpy
import scipy.stats

from .. import utils
from . import auxiliary_variable, variable


class StickBreakingProcess(variable.Variable):
    def __init__(self, gamma: float) -> None:
        """The stick breaking process gives the top-level weights shared by every transition row.

        It contains a partition of the unit interval into infinitely many intervals, with each interval's size given
        by a beta random variable multiplied by the remaining length (the beta variable has distribution
        ``Beta(1, gamma)``). We do not capture the infinite number of states: instead, the final entry of ``value``
        aggregates the tail, and is broken further whenever a state is instantiated.

        Args:
            gamma: The concentration of the top-level Dirichlet process.

        """
        super(StickBreakingProcess, self).__init__()
        self.gamma: float = gamma

        # the whole stick belongs to the unseen states
        self.value: typing.List[float] = [1.0]

    @property
    def k(self) -> int:
        return len(self.value) - 1

    @property
    def reserved(self) -> float:
        """The weight of all states which are not yet instantiated.

        Returns:
            The final stick length.
        """
        return self.value[-1]

    def log_likelihood(self) -> float:
        """The likelihood of the stick breaking process is the product of likelihoods of each component length.

        Returns:
            The log likelihood (under the prior distribution) of the stick breaking process' current value.

        """
        values = self.value[:-1]
        betas = [val / (1 + val - cumval) for val, cumval in zip(values, numpy.cumsum(values))]
        log_likelihoods = [scipy.stats.beta.logpdf(x=min(b, 1.0), a=1, b=self.gamma) for b in betas]
        return float(sum(log_likelihoods))

    def add_state(self, rng: numpy.random.Generator, state: typing.Optional[int] = None) -> None:
        """Break the reserved stick into a weight for a new state and a new reserved weight.

        Args:
            rng: The random generator to draw from.
            state: A state previously returned to the reserved stick, to be given weight again. If None, a new
                state is appended.

        """
        if state is None:
            state = len(self.value) - 1
            self.value.append(0.0)
        self.remove_state(state)

        breakage = utils.sample_beta(1.0, self.gamma, rng)
        remainder = self.value[-1]
        self.value[state] = breakage * remainder
        self.value[-1] = (1.0 - breakage) * remainder

    def remove_state(self, state: int) -> None:
        """Return the weight of a state to the reserved stick.

        Args:
            state: The state to empty.

        """
        self.value[-1] += self.value[state]
        self.value[state] = 0.0

    def resample(
        self, auxiliary: "auxiliary_variable.AuxiliaryVariable", rng: numpy.random.Generator
    ) -> typing.List[float]:
        """Draw another realisation of the stick breaking process from its conditional distribution.

        The conditional distribution is parametrised completely by the auxiliary variables: the concentration for
        each instantiated state is the column sum of the auxiliary counts, and the reserved weight takes ``gamma``.

        Args:
            auxiliary: The auxiliary variables, already resampled.
            rng: The random generator to draw from.

        Returns:
            The new value of beta.

        Raises:
            ValueError: If the auxiliary variables describe a different number of states.

        """
        parameters = auxiliary.value_aggregated()
        if len(parameters) != self.k:
            raise ValueError("Auxiliary variables have {} states but beta has {}.".format(len(parameters), self.k))
        parameters.append(self.gamma)

        self.value = list(utils.sample_dirichlet(parameters, rng))
        return self.value
