"""Errors raised when a sampling step cannot complete."""


class DegenerateDistributionError(RuntimeError):
    """A categorical distribution had no probability mass to sample from."""


class StateExpansionError(RuntimeError):
    """Beam expansion instantiated more states than the model allows."""
