"""
Alembic migrations produce the same tables the ORM models declare.
"""

import os
import shutil
import tempfile
import unittest
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from scheduler.models import metadata

BACKEND_DIR = Path(__file__).resolve().parents[1]


class TestMigrations(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.url = f"sqlite:///{os.path.join(self.tmpdir, 'migrated.db')}"

        self.config = Config(str(BACKEND_DIR / "alembic.ini"))
        self.config.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
        self.config.set_main_option("sqlalchemy.url", self.url)
        self.config.attributes["configure_logger"] = False

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_upgrade_creates_model_tables(self):
        command.upgrade(self.config, "head")

        engine = create_engine(self.url)
        try:
            inspector = inspect(engine)
            tables = set(inspector.get_table_names())
            self.assertTrue(set(metadata.tables).issubset(tables))

            columns = {c["name"] for c in inspector.get_columns("appointments")}
            self.assertEqual(columns, {c.name for c in metadata.tables["appointments"].columns})
        finally:
            engine.dispose()

    def test_downgrade_removes_tables(self):
        command.upgrade(self.config, "head")
        command.downgrade(self.config, "base")

        engine = create_engine(self.url)
        try:
            self.assertEqual(set(inspect(engine).get_table_names()) & set(metadata.tables), set())
        finally:
            engine.dispose()


if __name__ == "__main__":
    unittest.main()
