"""A non-parametric Bayesian hierarchical Dirichlet process.

This model ties together the Bayesian variables of the transition dynamics. The top-level stick breaking process
(beta, governed by gamma) is the base measure of a family of Dirichlet processes (pi, governed by alpha0), one per
latent state. Auxiliary variables (m) make the conditional distribution of beta tractable. Only the states required by
the beam are instantiated; the remaining mass of beta and of every row of pi is kept in a single reserved entry.
"""

import typing

import numpy

from .. import ragged
from . import auxiliary_variable, dirichlet_process_family, stick_breaking_process, variable


class HierarchicalDirichletProcess(variable.Variable):
    """A non-parametric Bayesian hierarchical Dirichlet process."""

    def __init__(self, gamma: float, alpha0: float, exact: bool = False) -> None:
        """A non-parametric Bayesian hierarchical Dirichlet process, with no states instantiated.

        Args:
            gamma: the concentration of the top-level stick breaking process. Higher values of gamma leave more
                weight for states that have not been instantiated.
            alpha0: the concentration of every transition row. Higher values keep rows of the transition matrix more
                similar to beta.
            exact: If True, auxiliary variables use exact Stirling numbers.

        """
        super(HierarchicalDirichletProcess, self).__init__()
        self.gamma: float = gamma
        self.alpha0: float = alpha0

        # create all component distributions (beta, auxiliary variables, and pi)
        self.beta = stick_breaking_process.StickBreakingProcess(gamma=self.gamma)
        self.auxiliary_variable = auxiliary_variable.AuxiliaryVariable(alpha0=self.alpha0, exact=exact)
        self.pi = dirichlet_process_family.DirichletProcessFamily(alpha0=self.alpha0)

    @property
    def k(self) -> int:
        return self.beta.k

    @property
    def max_reserved(self) -> float:
        return self.pi.max_reserved

    def log_likelihood(self) -> float:
        """The prior log likelihood of beta and pi.

        Returns:
            The sum of the beta and pi log likelihoods.

        """
        return self.beta.log_likelihood() + self.pi.log_likelihood(self.beta.value)

    def add_state(self, rng: numpy.random.Generator, state: typing.Optional[int] = None) -> None:
        """Instantiate one more state by breaking the reserved mass of beta and of every transition row.

        The new state's own transition row is first drawn from the prior (with K + 1 entries), then every row
        (including the new one) gives part of its reserved probability to the new state.

        Args:
            rng: The random generator to draw from.
            state: A state previously returned to the reserved mass, whose slot is reused. If None, a new state is
                appended.

        """
        if state is not None:
            self.remove_state(state)
        self.pi.resample_row(self.pi.k if state is None else state, self.beta.value, rng)
        self.beta.add_state(rng, state=state)
        self.pi.add_state(self.beta.value, rng, state=state)

    def remove_state(self, state: int) -> None:
        """Return the weight of a state, in beta and in every transition row, to the reserved mass.

        Args:
            state: The state to empty. Its own transition row is left in place.

        """
        self.beta.remove_state(state)
        self.pi.remove_state(state)

    def resample_transitions(self, counts: ragged.RaggedMatrix, rng: numpy.random.Generator) -> ragged.RaggedMatrix:
        """Resample every transition row given the transition counts and current beta.

        Args:
            counts: The K x K transition counts of the latent series, including the starts of series as transitions
                from state 0.
            rng: The random generator to draw from.

        Returns:
            The new transition probabilities.

        """
        return self.pi.resample(self.beta.value, rng, counts=counts)

    def resample_beta(self, counts: ragged.RaggedMatrix, rng: numpy.random.Generator) -> typing.List[float]:
        """Resample the auxiliary variables, and then beta given the auxiliary variables.

        Args:
            counts: The K x K transition counts of the latent series.
            rng: The random generator to draw from.

        Returns:
            The new stick lengths.

        """
        self.auxiliary_variable.resample(counts, self.beta.value, rng)
        return self.beta.resample(self.auxiliary_variable, rng)

    def resample(self, counts: ragged.RaggedMatrix, rng: numpy.random.Generator) -> None:
        """Performs one iteration of sampling for the transition dynamics, given fixed latent series.

        The transition rows are resampled first, followed by the auxiliary variables and beta.

        Args:
            counts: The K x K transition counts of the latent series.
            rng: The random generator to draw from.

        """
        self.resample_transitions(counts, rng)
        self.resample_beta(counts, rng)
