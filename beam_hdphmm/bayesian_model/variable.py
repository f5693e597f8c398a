import abc
import typing


class Variable(object, metaclass=abc.ABCMeta):
    """A parent class for Bayesian variables within the beam sampler."""

    @abc.abstractmethod
    def __init__(self) -> None:
        self.value: typing.Any = None

    @property
    def k(self) -> int:
        """Number of latent states the variable currently describes.

        Returns:
            The number of instantiated states.
        """
        return len(self.value)

    @abc.abstractmethod
    def log_likelihood(self, *args) -> float:
        raise NotImplementedError("Bayesian variables must implement a 'likelihood' method.")

    @abc.abstractmethod
    def resample(self, *args) -> typing.Any:
        raise NotImplementedError("Bayesian variables must define a 'resample' method.")
