# database/store.py - Store connection and JSON document collections

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

import aiosqlite

from error_handler import AppError, StoreError, handle_database_error
from utils import generate_id, format_timestamp, utc_now
from .sql_loader import sql_loader

logger = logging.getLogger(__name__)

ASCENDING = 1
DESCENDING = -1

Filter = Dict[str, Any]
Sort = Sequence[Tuple[str, int]]

IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
COMPARISON_OPERATORS = {'$gt': '>', '$gte': '>=', '$lt': '<', '$lte': '<='}

# =============================================================================
# DATABASE CONNECTION MANAGER
# =============================================================================

class DatabaseManager:
    """Owns the single long-lived store connection of the process"""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise StoreError("Document store is not connected")
        return self._connection

    async def connect(self) -> None:
        """Open the connection and make sure the collections exist"""
        if self._connection is not None:
            return

        try:
            # Autocommit: every statement is its own transaction
            self._connection = await aiosqlite.connect(self.db_path, isolation_level=None)
            await self._connection.execute("PRAGMA journal_mode = WAL")
            for statement in sql_loader.get_schema('create_collections'):
                await self._connection.execute(statement)
        except aiosqlite.Error as e:
            await self.close()
            raise handle_database_error("connect", e) from e

        logger.info(f"Connected to document store at {self.db_path}")

    async def close(self) -> None:
        if self._connection is None:
            return

        connection, self._connection = self._connection, None
        await connection.close()
        logger.info("Document store connection closed")

    async def execute_query(self, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Execute a SELECT query with parameterized inputs"""
        async with self.connection.execute(query, tuple(params)) as cursor:
            columns = [desc[0] for desc in cursor.description] if cursor.description else []
            rows = await cursor.fetchall()
            return [dict(zip(columns, row)) for row in rows]

    async def execute_command(self, query: str, params: Sequence[Any] = ()) -> int:
        """Execute an INSERT/UPDATE/DELETE command"""
        async with self.connection.execute(query, tuple(params)) as cursor:
            return cursor.rowcount

# =============================================================================
# DOCUMENT COLLECTION
# =============================================================================

class DocumentCollection:
    """Schema-free records stored as JSON, queried with Mongo-style filters.

    Supported filter vocabulary:
        {"field": value}                 equality, or membership when the field is a list
        {"field": {"$in": [...]}}        any of the values
        {"field": {"$gte": value}}       also $gt, $lt, $lte, $ne
        {"$or": [filter, ...]}           also $and
    The key "id" addresses the store-generated document id.
    """

    def __init__(self, db: DatabaseManager, name: str):
        if not IDENTIFIER.match(name):
            raise ValueError(f"Invalid collection name: {name!r}")
        self.db = db
        self.name = name

    async def insert(self, document: Dict[str, Any]) -> Dict[str, Any]:
        doc_id = generate_id()
        now = format_timestamp(utc_now())
        body = {key: value for key, value in document.items() if key != 'id'}
        body.update(createdAt=now, updatedAt=now)

        await self._run(
            'insert',
            self.db.execute_command,
            f"INSERT INTO {self.name} (id, data) VALUES (?, ?)",
            (doc_id, json.dumps(body))
        )
        return {'id': doc_id, **body}

    async def find_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        rows = await self._run(
            'find_by_id',
            self.db.execute_query,
            f"SELECT id, data FROM {self.name} WHERE id = ?",
            (doc_id,)
        )
        return self._to_document(rows[0]) if rows else None

    async def find(
        self,
        query: Optional[Filter] = None,
        sort: Optional[Sort] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        where, params = self._compile_filter(query)
        sql = f"SELECT id, data FROM {self.name} WHERE {where}"

        order_by = []
        for field, direction in sort or ():
            expression, field_params = self._field(field)
            order_by.append(f"{expression} {'DESC' if direction == DESCENDING else 'ASC'}")
            params.extend(field_params)
        if order_by:
            # Insertion order breaks ties
            last_direction = 'DESC' if sort[-1][1] == DESCENDING else 'ASC'
            order_by.append(f"rowid {last_direction}")
            sql += " ORDER BY " + ", ".join(order_by)

        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))

        rows = await self._run('find', self.db.execute_query, sql, params)
        return [self._to_document(row) for row in rows]

    async def count(self, query: Optional[Filter] = None) -> int:
        where, params = self._compile_filter(query)
        rows = await self._run(
            'count',
            self.db.execute_query,
            f"SELECT COUNT(*) AS total FROM {self.name} WHERE {where}",
            params
        )
        return rows[0]['total']

    async def update_by_id(self, doc_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Merge changes into a document; a None value removes the field.

        Returns the updated document, or None when no document has that id.
        """
        patch = {key: value for key, value in changes.items() if key not in ('id', 'createdAt')}
        patch['updatedAt'] = format_timestamp(utc_now())

        updated = await self._run(
            'update_by_id',
            self.db.execute_command,
            f"UPDATE {self.name} SET data = json_patch(data, ?) WHERE id = ?",
            (json.dumps(patch), doc_id)
        )
        if not updated:
            return None
        return await self.find_by_id(doc_id)

    async def delete_by_id(self, doc_id: str) -> bool:
        deleted = await self._run(
            'delete_by_id',
            self.db.execute_command,
            f"DELETE FROM {self.name} WHERE id = ?",
            (doc_id,)
        )
        return deleted > 0

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _run(self, operation: str, executor, sql: str, params: Sequence[Any]):
        try:
            return await executor(sql, params)
        except AppError:
            raise
        except aiosqlite.Error as e:
            raise handle_database_error(f"{operation} {self.name}", e) from e

    @staticmethod
    def _to_document(row: Dict[str, Any]) -> Dict[str, Any]:
        return {'id': row['id'], **json.loads(row['data'])}

    @staticmethod
    def _field(field: str) -> Tuple[str, List[Any]]:
        if field == 'id':
            return 'id', []
        if not all(IDENTIFIER.match(part) for part in field.split('.')):
            raise ValueError(f"Invalid field name: {field!r}")
        return 'json_extract(data, ?)', [f'$.{field}']

    def _compile_filter(self, query: Optional[Filter]) -> Tuple[str, List[Any]]:
        if not query:
            return '1 = 1', []

        clauses: List[str] = []
        params: List[Any] = []
        for key, condition in query.items():
            if key in ('$or', '$and'):
                if not condition:
                    raise ValueError(f"{key} needs at least one filter")
                parts = [self._compile_filter(sub_query) for sub_query in condition]
                joiner = ' OR ' if key == '$or' else ' AND '
                clauses.append('(' + joiner.join(sql for sql, _ in parts) + ')')
                for _, sub_params in parts:
                    params.extend(sub_params)
            elif isinstance(condition, dict):
                for operator, operand in condition.items():
                    sql, operator_params = self._compile_operator(key, operator, operand)
                    clauses.append(sql)
                    params.extend(operator_params)
            else:
                sql, equality_params = self._compile_membership(key, [condition])
                clauses.append(sql)
                params.extend(equality_params)

        return ' AND '.join(clauses), params

    def _compile_operator(self, field: str, operator: str, operand: Any) -> Tuple[str, List[Any]]:
        if operator == '$in':
            return self._compile_membership(field, list(operand))
        if operator == '$ne':
            sql, params = self._compile_membership(field, [operand])
            return f"NOT {sql}", params
        if operator in COMPARISON_OPERATORS:
            expression, params = self._field(field)
            return f"{expression} {COMPARISON_OPERATORS[operator]} ?", params + [operand]
        raise ValueError(f"Unsupported filter operator: {operator}")

    def _compile_membership(self, field: str, values: List[Any]) -> Tuple[str, List[Any]]:
        """Match a scalar field equal to any value, or a list field containing any value"""
        if not values:
            return '0 = 1', []

        placeholders = ', '.join('?' for _ in values)
        if field == 'id':
            return f"id IN ({placeholders})", list(values)

        _, path_params = self._field(field)
        # json_each yields a single row for a scalar and one row per element for a list
        sql = (
            f"EXISTS (SELECT 1 FROM json_each({self.name}.data, ?) "
            f"WHERE json_each.value IN ({placeholders}))"
        )
        return sql, path_params + list(values)
