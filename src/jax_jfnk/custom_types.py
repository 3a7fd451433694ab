"""Type aliases to improve type hint readability."""

from typing import Any, Callable, TypeAlias

Vector: TypeAlias = Any
ResidualFn: TypeAlias = Callable[[Vector, Vector], None]
LinearOperator: TypeAlias = Callable[[Vector, Vector], None]
ErrorCallback: TypeAlias = Callable[[float, int], bool | None]
NormFn: TypeAlias = Callable[[Vector], float]
ResidualAtAlpha: TypeAlias = Callable[[float], float]
