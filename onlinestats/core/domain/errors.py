class InvalidParameterError(ValueError):
    """A statistic was constructed with parameters outside their domain."""


class ThawError(ValueError):
    """Frozen state is malformed and cannot be turned back into a statistic."""
