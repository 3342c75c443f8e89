"""
Point the app at a throwaway SQLite database before anything imports it,
then create the schema. Runs before any test module loads.
"""
import os
import tempfile

_tmpdir = tempfile.mkdtemp(prefix="liftlog-tests-")
os.environ["DB_URL"] = f"sqlite+pysqlite:///{os.path.join(_tmpdir, 'test.db')}"
os.environ.setdefault("SECRET_KEY", "test-secret")

from app.db import Base, engine  # noqa: E402
from app import models  # noqa: E402,F401

Base.metadata.create_all(engine)
