"""
Create the database tables and seed the default currencies.
Run this once when setting up a new environment.
"""
import sys

from app import create_app
from extensions import db
from models.currencies import Currency, seed_currencies


def init_db(config_name='development'):
    """Create every table and add the default currencies that are missing."""
    app = create_app(config_name)

    with app.app_context():
        print("Creating database tables...")
        db.create_all()
        print(f"Database location: {app.config['SQLALCHEMY_DATABASE_URI']}")

        added = seed_currencies()

        print("\nTables:")
        for table in db.metadata.sorted_tables:
            print(f"  - {table.name}")
        print(f"\n{added} currencies added, {Currency.query.count()} available.")


if __name__ == '__main__':
    init_db(sys.argv[1] if len(sys.argv) > 1 else 'development')
