# app/main.py
# uvicorn app.main:app --reload
from .entrypoints.fastapi_app import create_app

app = create_app()
