"""ASGI entrypoint for the marble run catalog API."""

from marble_catalog.api.app import create_app
from marble_catalog.containers import build_container

app = create_app(build_container())
