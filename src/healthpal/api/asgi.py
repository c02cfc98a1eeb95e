"""ASGI entrypoint for the health pal API."""

from healthpal.api.app import create_app
from healthpal.containers import build_container

app = create_app(build_container())
