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

from __future__ import annotations

from typing import Any, Callable, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

R = TypeVar("R")


def _describe(exc: BaseException) -> str | None:
    """Best-effort status description for ``exc``.

    Exceptions without a message, or whose ``__str__`` itself fails, are
    described as ``None``.
    """
    try:
        return str(exc) or None
    except Exception:  # pylint: disable=broad-exception-caught
        return None


def traced_call(
    wrapped: Callable[..., R],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
    span: Span,
) -> R:
    """Run ``wrapped`` inside an already started ``span``.

    The span gets an ``OK`` status when the call returns and an ``ERROR``
    status carrying the exception message when it raises. The exception is
    re-raised as is, and the span is ended exactly once on every path.
    """
    try:
        with trace.use_span(
            span, record_exception=False, set_status_on_exception=False
        ):
            result = wrapped(*args, **kwargs)
    except BaseException as exc:
        span.set_status(Status(StatusCode.ERROR, _describe(exc)))
        raise
    else:
        span.set_status(Status(StatusCode.OK))
        return result
    finally:
        span.end()
