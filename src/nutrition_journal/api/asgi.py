"""ASGI entrypoint for the nutrition journal API."""

from nutrition_journal.api.app import create_app
from nutrition_journal.containers import build_container

app = create_app(build_container())
