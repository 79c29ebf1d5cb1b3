"""
SQL Schema Loader Utility

Keeps the DDL for the document collections in external .sql files.

Usage:
    from database.sql_loader import sql_loader

    statements = sql_loader.get_schema('create_collections')
"""

import logging
from typing import Dict, List
from pathlib import Path

logger = logging.getLogger(__name__)

class SQLLoader:
    """Loads and caches schema statements from external files."""

    def __init__(self, sql_dir: str = None):
        """Initialize the SQL loader.

        Args:
            sql_dir: Path to the SQL directory. Defaults to './sql' relative to this file.
        """
        if sql_dir is None:
            sql_dir = Path(__file__).parent / 'sql'

        self.sql_dir = Path(sql_dir)
        self.schema_dir = self.sql_dir / 'schema'

        self._schema_cache: Dict[str, List[str]] = {}

    def get_schema(self, schema_name: str) -> List[str]:
        """Get schema statements from a SQL file.

        Args:
            schema_name: Name of the schema file (without .sql extension)

        Returns:
            List of SQL statements

        Raises:
            FileNotFoundError: if the schema file does not exist
        """
        if schema_name not in self._schema_cache:
            self._schema_cache[schema_name] = self._load_schema(schema_name)

        return self._schema_cache[schema_name]

    def _load_schema(self, schema_name: str) -> List[str]:
        sql_file = self.schema_dir / f"{schema_name}.sql"

        if not sql_file.exists():
            logger.error(f"Schema file not found: {sql_file}")
            raise FileNotFoundError(sql_file)

        with open(sql_file, 'r', encoding='utf-8') as f:
            content = f.read()

        statements = self._parse_schema(content)
        logger.debug(f"Loaded {len(statements)} schema statements from {sql_file.name}")
        return statements

    def _parse_schema(self, content: str) -> List[str]:
        """Parse schema statements from file content."""
        # Split by semicolon and clean up
        statements = []
        current_statement = []

        for line in content.split('\n'):
            line = line.strip()

            # Skip empty lines and comments
            if not line or line.startswith('--'):
                continue

            current_statement.append(line)

            # Check if statement is complete (ends with semicolon)
            if line.endswith(';'):
                statement = ' '.join(current_statement).strip()
                if statement:
                    statements.append(statement)
                current_statement = []

        # Add any remaining statement
        if current_statement:
            statement = ' '.join(current_statement).strip()
            if statement:
                statements.append(statement)

        return statements

# Global instance for easy access
sql_loader = SQLLoader()
