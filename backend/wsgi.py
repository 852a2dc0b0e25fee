# backend/wsgi.py
from playtab import create_app

app = create_app()
