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

"""Span attributes shared by every sqlite_sync span."""

from __future__ import annotations

from opentelemetry.semconv._incubating.attributes.db_attributes import (
    DB_SYSTEM,
    DbSystemValues,
)
from opentelemetry.semconv.attributes.db_attributes import DB_QUERY_TEXT
from opentelemetry.util.types import Attributes

DB_SYSTEM_VALUE_SQLITE = DbSystemValues.SQLITE.value

__all__ = [
    "DB_QUERY_TEXT",
    "DB_SYSTEM",
    "DB_SYSTEM_VALUE_SQLITE",
    "query_attributes",
    "system_attributes",
]


def system_attributes() -> Attributes:
    return {DB_SYSTEM: DB_SYSTEM_VALUE_SQLITE}


def query_attributes(query: str | None) -> Attributes:
    """Return the system attributes plus ``db.query.text``.

    The query text is left out when there is none to report.
    """
    attributes = {DB_SYSTEM: DB_SYSTEM_VALUE_SQLITE}
    if query is not None:
        attributes[DB_QUERY_TEXT] = query
    return attributes
