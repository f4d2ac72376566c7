# backend/wsgi.py
from pgims import create_app

app = create_app()
