# Copyright The OpenTelemetry Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Replacement of class methods with ``wrapt`` function wrappers.

Every replaced method is recorded in a :class:`MethodPatcher` so it can be
put back exactly as it was found.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from wrapt import wrap_function_wrapper

_logger = logging.getLogger(__name__)

WrapperFactory = Callable[[Callable[..., Any]], Callable[..., Any]]

_MISSING = object()


class AlreadyWrappedError(RuntimeError):
    """Raised when wrapping a method that is still wrapped."""


def _qualname(target: Any, name: str) -> str:
    owner = getattr(target, "__qualname__", type(target).__qualname__)
    return f"{owner}.{name}"


class MethodPatcher:
    """Registry of the methods currently replaced by a wrapper.

    Keys are ``(target, name)`` pairs; values are what ``target.__dict__``
    held under ``name`` before wrapping, or a sentinel when the method was
    inherited.
    """

    def __init__(self) -> None:
        self._originals: dict[tuple[Any, str], Any] = {}

    def is_wrapped(self, target: Any, name: str) -> bool:
        return (target, name) in self._originals

    def wrap(self, target: Any, name: str, factory: WrapperFactory) -> None:
        """Replace ``target.name`` with the wrapper built by ``factory``.

        ``factory`` receives the original callable and returns a ``wrapt``
        style wrapper ``(wrapped, instance, args, kwargs)``.
        """
        key = (target, name)
        if key in self._originals:
            raise AlreadyWrappedError(
                f"{_qualname(target, name)} is already wrapped"
            )
        original = getattr(target, name)
        recorded = vars(target).get(name, _MISSING)
        wrap_function_wrapper(target, name, factory(original))
        self._originals[key] = recorded
        _logger.debug("Wrapped %s", _qualname(target, name))

    def wrap_many(
        self, target: Any, names: Iterable[str], factory: WrapperFactory
    ) -> None:
        for name in names:
            self.wrap(target, name, factory)

    def unwrap(self, target: Any, name: str) -> None:
        """Restore ``target.name``; does nothing if it was never wrapped."""
        original = self._originals.pop((target, name), None)
        if original is None:
            _logger.debug("%s is not wrapped", _qualname(target, name))
            return
        if original is _MISSING:
            delattr(target, name)
        else:
            setattr(target, name, original)
        _logger.debug("Unwrapped %s", _qualname(target, name))

    def unwrap_many(self, target: Any, names: Iterable[str]) -> None:
        for name in names:
            self.unwrap(target, name)

    def unwrap_all(self) -> None:
        for target, name in list(self._originals):
            self.unwrap(target, name)
