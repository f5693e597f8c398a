"""A beam sampler for non-parametric Hierarchical Dirichlet process hidden Markov models.

Hierarchical Dirichlet Process Hidden Markov Model (HDPHMM).
The HDPHMM object holds a corpus of discrete observation series together with one
posterior sample of every latent quantity. This structure involves

  + A transition probability, which dictates the probability that any given latent state
      is followed by another given state. Every row shares a hierarchical Dirichlet
      process prior, so the number of latent states is unbounded. Row 0 also gives the
      distribution of the first state of every series.
  + An emission probability, which dictates the probability of each observation
      conditional on the latent state at the same time point.
  + Slice variables, one per observation, which restrict the infinite transition matrix
      to a finite beam of states that need to be instantiated.

Each call to `advance` performs one beam sampling sweep (van Gael et al., 2008),
resampling slice variables, latent sequences, transition probabilities, emission
probabilities and the top-level stick lengths, in that order. Running the chain for
many sweeps is left to the caller.
"""

import typing

import numpy
import terminaltables

from . import chain, ragged
from .bayesian_model import emission_model as emission_models
from .bayesian_model import hierarchical_dirichlet_process
from .bayesian_model.dirichlet_distribution_family import DirichletDistributionFamily
from .exceptions import StateExpansionError

# Shorthand for numeric types.
Numeric = typing.Union[int, float]


class HDPHMM(object):
    """A posterior sample of a Hierarchical Dirichlet Process Hidden Markov Model, updated by beam sampling."""

    def __init__(
        self,
        data: typing.Union[ragged.RaggedMatrix, typing.Iterable[typing.Sequence[int]]],
        H: typing.Optional[typing.Sequence[float]] = None,
        gamma: float = 1.0,
        alpha0: float = 1.0,
        emission_model: typing.Optional[emission_models.EmissionModel] = None,
        max_states: int = 1000,
        exact_stirling: bool = False,
        random_state: typing.Union[None, int, numpy.random.Generator] = None,
    ) -> None:
        """Create the sampler with a single instantiated latent state.

        The 'non-parametric' description means that the number of hidden states does not need to be set. Instead, the
        beam sampler instantiates exactly as many states as the slice variables require at each sweep. The dynamics
        are governed by a few hyperparameters, which are fixed for the lifetime of the sampler.
            + gamma: concentration of the top-level Dirichlet process. Higher values of gamma leave more weight for
                unseen states, so the sampler is more likely to explore new states.
            + alpha0: concentration of each transition row. Higher values of alpha0 keep rows of the transition
                matrix closer to the top-level stick lengths.
            + H: Dirichlet prior over the N emission symbols. Higher values pull every state's emission distribution
                towards H / sum(H).

        Args:
            data: The observed series, each a sequence of symbols in [0, N). Series can be different lengths, or zero
                length.
            H: Positive Dirichlet prior over emissions. If None, a vector of ones is used with one entry for each
                symbol up to the largest observed. Ignored if `emission_model` is given.
            gamma: The top-level concentration, must be positive.
            alpha0: The transition row concentration, must be positive.
            emission_model: An alternative observation model. Defaults to categorical emissions with prior H.
            max_states: The largest number of states the beam is allowed to instantiate.
            exact_stirling: If True, auxiliary variables use exact Stirling numbers (slow for long series).
            random_state: A seed or numpy Generator. The sampler owns the resulting generator, and every draw of
                every sweep comes from it.

        Raises:
            ValueError: for invalid hyperparameters or observations.

        """
        # hyperparameters are fixed, so check them once
        for label, value in (("gamma", gamma), ("alpha0", alpha0)):
            if not numpy.isfinite(value) or not value > 0:
                raise ValueError("{} must be positive and finite, not {}".format(label, value))
        if not isinstance(max_states, int) or max_states < 1:
            raise ValueError("max_states must be a positive integer")

        # the sampler owns its random stream
        self.rng: numpy.random.Generator = numpy.random.default_rng(random_state)

        # store observations
        self._data: ragged.RaggedMatrix = ragged.RaggedMatrix(data)
        if emission_model is None:
            emission_model = DirichletDistributionFamily(default_prior(self._data) if H is None else H)
        elif not isinstance(emission_model, emission_models.EmissionModel):
            raise ValueError("emission_model must be an EmissionModel")
        emission_model.validate(self._data)
        self.emission_model: emission_models.EmissionModel = emission_model

        # create a hierarchical Dirichlet process model to store the Bayesian transition dynamics
        self.transition_model = hierarchical_dirichlet_process.HierarchicalDirichletProcess(
            gamma=gamma, alpha0=alpha0, exact=exact_stirling
        )
        self.max_states: int = max_states

        # latent variables have the same shape as the data
        self.hidden_states: ragged.RaggedMatrix = ragged.RaggedMatrix.from_sizes(self._data.sizes(), fill=0)
        self.slice_variables: ragged.RaggedMatrix = ragged.RaggedMatrix.from_sizes(self._data.sizes(), fill=0.0)

        # use internal properties to store aggregate statistics (used to update Bayesian variables efficiently)
        self.transition_counts: ragged.RaggedMatrix = ragged.RaggedMatrix()

        # unoccupied states returned to the reserved mass, reused before new states are appended
        self.free_states: typing.List[int] = []

        self.initialise()

    def initialise(self) -> None:
        """Instantiate the first state and assign it to every observation.

        Initialisation involves:
            + Breaking the top-level stick once.
            + Drawing the emission parameters of the state from the prior.
            + Updating all counts.
            + Drawing the first transition row given the counts.

        """
        self.transition_model.beta.add_state(self.rng)
        self.emission_model.add_state(self.rng)
        self.update_counts()
        self.transition_model.auxiliary_variable.value = ragged.RaggedMatrix.uniform(self.k, self.k, fill=0)
        self.transition_model.pi.resample_row(
            0, self.transition_model.beta.value, self.rng, counts=self.transition_counts
        )

    @property
    def data(self) -> ragged.RaggedMatrix:
        """The observed series, fixed for the lifetime of the sampler.

        Returns:
            A copy of the observations.

        """
        return self._data.copy()

    @property
    def gamma(self) -> float:
        return self.transition_model.gamma

    @property
    def alpha0(self) -> float:
        return self.transition_model.alpha0

    @property
    def H(self) -> typing.Optional[numpy.ndarray]:
        """Dirichlet prior over emissions, if the emission model has one.

        Returns:
            A copy of H, or None for emission models without a Dirichlet prior.

        """
        prior = getattr(self.emission_model, "H", None)
        return None if prior is None else prior.copy()

    @property
    def c(self) -> int:
        """Number of series in the HMM.

        Returns:
            The number of observed series.

        """
        return len(self._data)

    @property
    def k(self) -> int:
        """Number of latent states currently instantiated.

        Returns:
            The number of states, excluding the reserved mass for unseen states.
        """
        return self.transition_model.k

    @property
    def K(self) -> int:
        return self.k

    @property
    def n(self) -> int:
        """Number of observations over all series.

        Returns:
            An observation count.

        """
        return sum(self._data.sizes())

    @property
    def transition_probs(self) -> ragged.RaggedMatrix:
        return self.transition_model.pi.value

    @property
    def emission_probs(self) -> ragged.RaggedMatrix:
        return self.emission_model.value

    @property
    def stick_weights(self) -> typing.List[float]:
        return self.transition_model.beta.value

    @property
    def aux_counts(self) -> ragged.RaggedMatrix:
        return self.transition_model.auxiliary_variable.value

    @property
    def max_reserved_prob(self) -> float:
        """Largest reserved probability over every transition row, reachable in the beam or not.

        Returns:
            A probability; see `beam_reserved_prob` for the quantity the beam must cover.

        """
        return self.transition_model.max_reserved

    def __repr__(self) -> str:
        return "<beam_hdphmm.HDPHMM, size {C}>".format(C=self.c)

    def __str__(self) -> str:
        fs = "beam_hdphmm.HDPHMM, ({C} series, {K} states, {Ob} observations)"
        return fs.format(C=self.c, K=self.k, Ob=self.n)

    def to_array(self) -> numpy.ndarray:
        """Create a table containing the latent state and observation of every series and time step.

        Returns:
            A numpy array with shape (n, 4), with columns for series index, time step, latent state, and observation.

        """
        rows = [
            (i, t, state, observation)
            for i, (states, sequence) in enumerate(zip(self.hidden_states, self._data))
            for t, (state, observation) in enumerate(zip(states, sequence))
        ]
        return numpy.array(rows).reshape(len(rows), 4)

    def add_state(self) -> int:
        """Instantiate a state, and update all parameters accordingly.

        A free state (one previously returned to the reserved mass) is reused if there is one, otherwise a new state
        is appended.

        Returns:
            The index of the instantiated state.

        """
        if self.free_states:
            state = self.free_states.pop(0)
            self.transition_model.add_state(self.rng, state=state)
            self.emission_model.add_state(self.rng, state=state)
            return state

        self.transition_model.add_state(self.rng)
        self.emission_model.add_state(self.rng)

        # new states have no observations
        for counts in (self.transition_counts, self.aux_counts):
            for row in counts:
                row.append(0)
            counts.append([0] * (len(counts) + 1))
        return self.k - 1

    def free_unused_states(self) -> typing.List[int]:
        """Return every state with no observations to the reserved mass, so that its slot can be reused.

        State 0 is never freed, since its transition row is also the distribution of the first state of each series.
        Freed states keep their index, so K does not decrease; they have zero weight in beta and in every transition
        row until they are instantiated again.

        Returns:
            The freed states.

        """
        occupied = {state for states in self.hidden_states for state in states}
        self.free_states = [state for state in range(1, self.k) if state not in occupied]
        for state in self.free_states:
            self.transition_model.remove_state(state)
        return list(self.free_states)

    def reachable_states(self, min_slice: float) -> typing.List[int]:
        """States that can be visited by a latent sequence when no slice variable is below `min_slice`.

        Every series starts from the transition row of state 0, and a transition from state i to state j is only
        allowed if its probability exceeds the slice variable. States outside this set have zero forward probability
        at every time step, so their reserved probability does not constrain the beam.

        Args:
            min_slice: The smallest slice variable over all series.

        Returns:
            The reachable states, in increasing order.

        """
        allowed = self.transition_probs.to_array()[:, : self.k] > min_slice
        reachable = numpy.zeros(self.k, dtype=bool)
        reachable[0] = True
        frontier = [0]
        while frontier:
            new_states = allowed[frontier].any(axis=0) & ~reachable
            reachable |= new_states
            frontier = numpy.flatnonzero(new_states).tolist()
        return numpy.flatnonzero(reachable).tolist()

    def beam_reserved_prob(self, min_slice: float) -> float:
        """The largest reserved probability over the transition rows of states reachable in the beam.

        Args:
            min_slice: The smallest slice variable over all series.

        Returns:
            A probability; the beam covers every slice variable once this is at most `min_slice`.

        """
        return max(self.transition_probs[state][-1] for state in self.reachable_states(min_slice))

    def expand_states(self, min_slice: float) -> int:
        """Instantiate states until the reserved probability of every reachable row is below the smallest slice.

        Each new state takes part of the reserved probability of every row, so the reserved probability shrinks with
        every iteration.

        Args:
            min_slice: The smallest slice variable over all series.

        Returns:
            The number of states instantiated, including reused free states.

        Raises:
            StateExpansionError: If the beam requires more than `max_states` states.

        """
        states_added = 0
        reserved = self.beam_reserved_prob(min_slice)
        while reserved > min_slice:
            if not self.free_states and self.k >= self.max_states:
                raise StateExpansionError(
                    "Beam requires more than {} states (reserved probability {}, smallest slice variable {})".format(
                        self.max_states, reserved, min_slice
                    )
                )
            self.add_state()
            states_added += 1
            reserved = self.beam_reserved_prob(min_slice)
        return states_added

    def update_counts(self) -> None:
        """Rebuild the transition counts from the current latent sequences.

        `transition_counts[i][j]` counts transitions from i to j within series. The first state of each series counts
        as a transition from state 0.

        """
        transition_counts = ragged.RaggedMatrix.uniform(self.k, self.k, fill=0)
        for states in self.hidden_states:
            for state_from, state_to in zip([0] + list(states[:-1]), states):
                transition_counts[state_from][state_to] += 1
        self.transition_counts = transition_counts

    def resample_slice_variables(self) -> None:
        """Draw new slice variables, free unused states, then expand the beam until it covers the smallest slice."""
        transition_probabilities = self.transition_probs.to_array()
        min_slice = 1.0
        for i, states in enumerate(self.hidden_states):
            self.slice_variables[i] = chain.sample_slice_variables(states, transition_probabilities, self.rng)
            min_slice = min([min_slice] + self.slice_variables[i])

        self.free_unused_states()
        self.expand_states(min_slice)

    def resample_hidden_states(self) -> None:
        """Resample the latent sequence of every series, and rebuild the counts from them."""
        transition_probabilities = self.transition_probs.to_array()
        for i, sequence in enumerate(self._data):
            self.hidden_states[i] = chain.resample_latent_sequence(
                self.emission_model.likelihood_matrix(sequence),
                self.slice_variables[i],
                transition_probabilities,
                self.rng,
            )
        self.update_counts()

    def resample_transitions(self) -> None:
        self.transition_model.resample_transitions(self.transition_counts, self.rng)

    def resample_emissions(self) -> None:
        self.emission_model.resample(self._data, self.hidden_states, self.k, self.rng)

    def resample_stick_weights(self) -> None:
        """Resample the auxiliary counts, then the top-level stick lengths given them."""
        self.transition_model.resample_beta(self.transition_counts, self.rng)

    def advance(self) -> None:
        """Perform one beam sampling sweep over every latent variable.

        The sweep resamples, in order, the slice variables (instantiating states as required), the latent sequences,
        the transition probabilities, the emission parameters, and the top-level stick lengths.

        """
        self.resample_slice_variables()
        self.resample_hidden_states()
        self.resample_transitions()
        self.resample_emissions()
        self.resample_stick_weights()

    def chain_log_likelihoods(self) -> typing.List[float]:
        """Calculate the log likelihood of every series given its latent states and the current parameters.

        Returns:
            A list of the log likelihood for each series.

        """
        transition_probabilities = self.transition_probs.to_array()
        return [
            chain.log_likelihood(self.emission_model.likelihood_matrix(sequence), states, transition_probabilities)
            for sequence, states in zip(self._data, self.hidden_states)
        ]

    def log_likelihood(self) -> float:
        """The full joint likelihood of the parameters and all observed data.

        Returns:
            The total log likelihood of the model, including the hierarchical Dirichlet transition probabilities, the
                emission parameters, and the latent state transition and emission probabilities.

        """
        log_likelihoods = (
            self.transition_model.log_likelihood(),
            self.emission_model.log_likelihood(),
            sum(self.chain_log_likelihoods()),
        )
        return sum(log_likelihoods)

    def print_probabilities(self, digits: int = 4) -> typing.Tuple[str, str]:
        """Create an ascii-printable version of the transition and emission parameters.

        Args:
            digits: decimal places to print

        Returns:
            emission parameters, transition parameters: two tables, each containing a
                table parameters.
        """
        # make nested lists for clean printing
        emissions = [[str(k)] + [str(round(p, digits)) for p in row] for k, row in enumerate(self.emission_probs)]
        emissions.insert(0, ["S_i \\ E_i"] + self.emission_model.labels)
        transitions = [[str(k)] + [str(round(p, digits)) for p in row] for k, row in enumerate(self.transition_probs)]
        transitions.insert(0, ["S_i \\ S_j"] + [str(k) for k in range(self.k)] + ["unseen"])

        # format tables
        te = terminaltables.DoubleTable(emissions, "Emission probabilities")
        tt = terminaltables.DoubleTable(transitions, "Transition probabilities")
        te.padding_left = 1
        te.padding_right = 1
        tt.padding_left = 1
        tt.padding_right = 1
        te.justify_columns[0] = "right"
        tt.justify_columns[0] = "right"

        return te.table, tt.table


def default_prior(data: ragged.RaggedMatrix) -> numpy.ndarray:
    """A flat Dirichlet prior over every symbol up to the largest observed.

    Args:
        data: The observed series.

    Returns:
        A vector of ones.

    Raises:
        ValueError: If any observation is not an integer symbol.

    """
    symbols = [symbol for sequence in data for symbol in sequence]
    if not all(emission_models.is_integer(symbol) for symbol in symbols):
        raise ValueError("Observations must be integer symbols.")
    return numpy.ones(max(symbols, default=0) + 1)
