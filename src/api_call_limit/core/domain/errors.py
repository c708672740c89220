from __future__ import annotations

import math


class ConfigurationError(ValueError):
    """Invalid construction parameter or missing required setting."""


class ApiCallError(RuntimeError):
    """Any failure of a rate-limited API call.

    The original exception is kept on ``cause`` (and chained as ``__cause__``).
    No distinction is made between transient and permanent failures.
    """

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"API call failed: {cause!r}")
        self.cause = cause


class PermitPoolClosedError(RuntimeError):
    """Raised to callers waiting on (or entering) a closed permit pool."""


class PermitTimeoutError(TimeoutError):
    """No permit was granted before the caller's deadline."""


def require_positive(name: str, value: int | float) -> None:
    if not value > 0:
        raise ConfigurationError(f"Parameter '{name}' must be positive. Current value [{value}].")


def require_capacity(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"Parameter '{name}' must be an integer. Current value [{value!r}].")
    require_positive(name, value)


def require_window(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise ConfigurationError(f"Parameter '{name}' must be finite. Current value [{value}].")
    require_positive(name, value)
