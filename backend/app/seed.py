"""
Create tables and load the default catalog.

Usage:
    cd backend && python -m app.seed
"""

import logging

from app.models import create_tables, session_scope
from app.services import SeedService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    create_tables()
    with session_scope() as db:
        result = SeedService(db).seed_all()

    print("Seed complete:")
    for key, count in result.items():
        print(f"  {key.replace('_', ' ')}: {count}")


if __name__ == "__main__":
    main()
