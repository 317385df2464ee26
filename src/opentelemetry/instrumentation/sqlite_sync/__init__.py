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

"""
Instrumentation for the synchronous SQLite client ``sqlite_sync``, it can be
enabled by using ``SQLiteSyncInstrumentor``.

The following operations are traced, each in a ``CLIENT`` span named after
the operation:

* ``DatabaseSync.exec``
* ``DatabaseSync.prepare``, with ``db.query.text`` set to the prepared SQL
* ``StatementSync.all``, ``StatementSync.get`` and ``StatementSync.run``,
  with ``db.query.text`` set to the statement's ``source_sql``

The instrumentor may be enabled before ``sqlite_sync`` is imported, the
methods are then patched as soon as the module is loaded.

Usage
-----

.. code:: python

    from opentelemetry.instrumentation.sqlite_sync import SQLiteSyncInstrumentor

    SQLiteSyncInstrumentor().instrument()

    from sqlite_sync import DatabaseSync

    db = DatabaseSync(":memory:")
    db.exec("CREATE TABLE test (id NUMBER NOT NULL, data TEXT)")
    stmt = db.prepare("INSERT INTO test (id, data) VALUES (?, ?) RETURNING *")
    stmt.all(1, "foo")

The tracer provider can be changed after instrumenting:

.. code:: python

    SQLiteSyncInstrumentor().set_tracer_provider(tracer_provider)

API
---
"""

from __future__ import annotations

import logging
import sys
from types import ModuleType
from typing import Any, Callable, Collection

from wrapt import register_post_import_hook

from opentelemetry.instrumentation.instrumentor import BaseInstrumentor
from opentelemetry.instrumentation.sqlite_sync.attributes import (
    query_attributes,
    system_attributes,
)
from opentelemetry.instrumentation.sqlite_sync.package import _instruments
from opentelemetry.instrumentation.sqlite_sync.patch import MethodPatcher
from opentelemetry.instrumentation.sqlite_sync.utils import traced_call
from opentelemetry.instrumentation.sqlite_sync.version import __version__
from opentelemetry.instrumentation.utils import is_instrumentation_enabled
from opentelemetry.trace import SpanKind, Tracer, TracerProvider, get_tracer
from opentelemetry.util.types import Attributes

_logger = logging.getLogger(__name__)

_MODULE = "sqlite_sync"
_STATEMENT_METHODS = ("all", "get", "run")

_SCHEMA_URL = "https://opentelemetry.io/schemas/1.25.0"


class SQLiteSyncInstrumentor(BaseInstrumentor):
    """An instrumentor for ``sqlite_sync``

    See `BaseInstrumentor`
    """

    _tracer: Tracer | None = None
    _patcher: MethodPatcher | None = None
    _hook_registered = False
    _enabled = False

    def instrumentation_dependencies(self) -> Collection[str]:
        return _instruments

    def set_tracer_provider(
        self, tracer_provider: TracerProvider | None
    ) -> None:
        """Use ``tracer_provider`` for every span started from now on.

        Args:
            tracer_provider: The tracer provider to use. If ``None`` the
                globally configured one is used.
        """
        self._tracer = get_tracer(
            __name__,
            __version__,
            tracer_provider,
            schema_url=_SCHEMA_URL,
        )

    def _instrument(self, **kwargs: Any):
        """Patch ``sqlite_sync`` now or as soon as it is imported."""
        self.set_tracer_provider(kwargs.get("tracer_provider"))
        if self._patcher is None:
            self._patcher = MethodPatcher()
        self._enabled = True

        if not self._hook_registered:
            # runs immediately when the module is already imported
            register_post_import_hook(self._patch, _MODULE)
            self._hook_registered = True
            _logger.debug("Registered import hook for %s", _MODULE)
        elif _MODULE in sys.modules:
            self._patch(sys.modules[_MODULE])

    def _uninstrument(self, **kwargs: Any):
        self._enabled = False
        if self._patcher is not None:
            self._patcher.unwrap_all()

    def _patch(self, module: ModuleType) -> None:
        if not self._enabled:
            return
        database, statement = module.DatabaseSync, module.StatementSync
        if self._patcher.is_wrapped(database, "exec"):
            _logger.debug("%s is already patched", module.__name__)
            return

        self._patcher.wrap(database, "exec", self._wrap_exec)
        self._patcher.wrap(database, "prepare", self._wrap_prepare)
        self._patcher.wrap_many(
            statement, _STATEMENT_METHODS, self._wrap_statement
        )
        _logger.debug("Patched %s", module.__name__)

    def _traced(
        self,
        name: str,
        wrapped: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        attributes: Attributes,
    ):
        if not is_instrumentation_enabled():
            return wrapped(*args, **kwargs)

        span = self._tracer.start_span(
            name, kind=SpanKind.CLIENT, attributes=attributes
        )
        return traced_call(wrapped, args, kwargs, span)

    def _wrap_exec(self, original: Callable[..., Any]):
        # pylint: disable=unused-argument
        def exec_(wrapped, instance, args, kwargs):
            return self._traced(
                original.__name__, wrapped, args, kwargs, system_attributes()
            )

        return exec_

    def _wrap_prepare(self, original: Callable[..., Any]):
        # pylint: disable=unused-argument
        def prepare(wrapped, instance, args, kwargs):
            sql = args[0] if args else kwargs.get("sql")
            return self._traced(
                original.__name__, wrapped, args, kwargs, query_attributes(sql)
            )

        return prepare

    def _wrap_statement(self, original: Callable[..., Any]):
        def statement_execution(wrapped, instance, args, kwargs):
            return self._traced(
                original.__name__,
                wrapped,
                args,
                kwargs,
                query_attributes(getattr(instance, "source_sql", None)),
            )

        return statement_execution
