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

"""Minimal synchronous SQLite client used as the instrumented library.

Mirrors the surface traced by the instrumentation: ``DatabaseSync.exec``,
``DatabaseSync.prepare`` and ``StatementSync.all/get/run``.
"""

import sqlite3


class StatementSync:
    def __init__(self, connection, sql):
        self._connection = connection
        self.source_sql = sql

    def all(self, *params):
        cursor = self._connection.execute(self.source_sql, params)
        return [dict(row) for row in cursor.fetchall()]

    def get(self, *params):
        row = self._connection.execute(self.source_sql, params).fetchone()
        return dict(row) if row is not None else None

    def run(self, *params):
        cursor = self._connection.execute(self.source_sql, params)
        cursor.fetchall()
        return {
            "changes": cursor.rowcount,
            "last_insert_rowid": cursor.lastrowid,
        }


class DatabaseSync:
    def __init__(self, path):
        self._connection = sqlite3.connect(path, isolation_level=None)
        self._connection.row_factory = sqlite3.Row

    def exec(self, sql):
        self._connection.executescript(sql)

    def prepare(self, sql):
        try:
            # compiles without running, parameters are bound later
            self._connection.execute("EXPLAIN " + sql)
        except sqlite3.ProgrammingError:
            pass
        return StatementSync(self._connection, sql)

    def close(self):
        self._connection.close()
