from __future__ import annotations
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from ..errors import SpritePipelineError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of one attempt: either ``value`` or ``error`` is set.
    Lets the loader chain "try the alternate, else the original" without nesting try blocks.
    """
    value: T | None = None
    error: SpritePipelineError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: SpritePipelineError) -> "Result[T]":
        return cls(error=error)

    @classmethod
    async def attempt(cls, fn: Callable[..., Awaitable[T]], *args) -> "Result[T]":
        try:
            return cls.success(await fn(*args))
        except SpritePipelineError as err:
            return cls.failure(err)

    async def or_else(self, fallback: Callable[[], Awaitable["Result[T]"]]) -> "Result[T]":
        """Return self when ok, otherwise run the fallback attempt."""
        if self.ok:
            return self
        return await fallback()

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value
