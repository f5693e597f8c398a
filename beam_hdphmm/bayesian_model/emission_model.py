"""The interface shared by every observation model of the beam sampler."""

import abc
import typing

import numpy

from .. import ragged
from . import variable


class EmissionModel(variable.Variable):
    """A family of emission distributions, one per instantiated latent state.

    The beam sampler only interacts with observations through this interface, so alternative observation models can
    be used without changing the sampler itself.
    """

    def __init__(self) -> None:
        super(EmissionModel, self).__init__()
        self.value: ragged.RaggedMatrix = ragged.RaggedMatrix()

    @property
    @abc.abstractmethod
    def labels(self) -> typing.List[str]:
        """Column labels for the parameters stored in each row of ``value``."""

    @abc.abstractmethod
    def validate(self, observations: ragged.RaggedMatrix) -> None:
        """Check that every observation is supported by the model.

        Args:
            observations: The observed series.

        Raises:
            ValueError: If an observation is outside the support of the model.

        """

    @abc.abstractmethod
    def likelihood_matrix(self, sequence: typing.Sequence[typing.Any]) -> numpy.ndarray:
        """The likelihood of each observation under each instantiated state.

        Args:
            sequence: One observed series of length T.

        Returns:
            An array with shape (T, K).

        """

    @abc.abstractmethod
    def add_state(self, rng: numpy.random.Generator, state: typing.Optional[int] = None) -> None:
        """Draw the parameters of a state from the prior.

        Args:
            rng: The random generator to draw from.
            state: An existing state to overwrite. If None, a new row is appended.

        """

    @abc.abstractmethod
    def resample(
        self,
        observations: ragged.RaggedMatrix,
        hidden_states: ragged.RaggedMatrix,
        k: int,
        rng: numpy.random.Generator,
    ) -> ragged.RaggedMatrix:
        """Draw the parameters of every state from their posterior distribution.

        Args:
            observations: The observed series.
            hidden_states: The latent state of every observation.
            k: The number of instantiated states.
            rng: The random generator to draw from.

        Returns:
            The resampled value.

        """

    @abc.abstractmethod
    def log_likelihood(self) -> float:
        """The prior log likelihood of the current parameters."""


def is_integer(value: typing.Any) -> bool:
    return isinstance(value, (int, numpy.integer)) and not isinstance(value, (bool, numpy.bool_))
