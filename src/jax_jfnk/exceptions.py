"""Exceptions raised by the JFNK solver."""


class JFNKError(Exception):
    """Base exception for JFNK solver errors."""

    pass


class LineSearchConfigError(JFNKError, ValueError):
    """Raised when an unknown line search policy is requested."""

    def __init__(self, name: str, known: tuple = ()):
        self.name = name
        self.known = tuple(known)
        super().__init__(
            f"couldn't find line search method {name!r}. "
            f"Options: {', '.join(self.known)}"
        )


class NonFiniteResidualError(JFNKError, FloatingPointError):
    """Raised when the residual norm becomes NaN or Inf.

    Only raised when the solver is configured with ``check_finite=True``.
    """

    def __init__(self, iteration: int, residual: float):
        self.iteration = iteration
        self.residual = residual
        super().__init__(
            f"Non-finite residual norm {residual} at iteration {iteration}."
        )
