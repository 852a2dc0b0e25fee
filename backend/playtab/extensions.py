# Overview: Shared Flask extension instances (ORM session and Alembic migrations).
# Bound to the app in create_app(); import `db` from here, never from the app module.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate(compare_type=True)
