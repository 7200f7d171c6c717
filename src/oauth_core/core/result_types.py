# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Outcome values for grant processing.

Every OAuth2 error code is an expected outcome, so handlers hand back an
``Err`` carrying it instead of raising. ``Ok`` carries the successful
payload. Exceptions are left for faults the engine cannot classify.
"""

from typing import TYPE_CHECKING, Any, Generic, NoReturn, TypeVar

from attrs import frozen
from beartype import beartype

T = TypeVar("T")
E = TypeVar("E")


@frozen
class Ok(Generic[T]):
    """A successful outcome holding ``value``."""

    value: T

    @beartype
    def is_ok(self) -> bool:
        return True

    @beartype
    def is_err(self) -> bool:
        return False

    @property
    def ok_value(self) -> T:
        return self.value

    @property
    def err_value(self) -> None:
        return None

    @beartype
    def unwrap(self) -> T:
        return self.value

    @beartype
    def unwrap_err(self) -> NoReturn:
        raise ValueError(f"Expected a failure, got Ok({self.value!r})")


@frozen
class Err(Generic[E]):
    """A failed outcome holding ``error``."""

    error: E

    @beartype
    def is_ok(self) -> bool:
        return False

    @beartype
    def is_err(self) -> bool:
        return True

    @property
    def ok_value(self) -> None:
        return None

    @property
    def err_value(self) -> E:
        return self.error

    @beartype
    def unwrap(self) -> NoReturn:
        raise ValueError(f"Expected a success, got Err({self.error!r})")

    @beartype
    def unwrap_err(self) -> E:
        return self.error


if TYPE_CHECKING:
    Result = Ok[T] | Err[E]
else:

    class Result(Generic[T, E]):
        """Subscriptable at runtime so ``Result[T, E]`` can be used in annotations."""

        def __class_getitem__(cls, params: Any) -> Any:
            return Ok[Any] | Err[Any]
