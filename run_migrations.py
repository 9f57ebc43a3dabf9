"""Apply Alembic migrations up to a revision (``head`` by default)."""

import sys

from alembic import command
from alembic.config import Config

if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else "head"
    alembic_cfg = Config("alembic.ini")
    command.upgrade(alembic_cfg, target)
