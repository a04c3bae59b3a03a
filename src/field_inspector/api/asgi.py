"""ASGI entrypoint for the field inspector API."""

from field_inspector.api.app import create_app
from field_inspector.containers import build_container

app = create_app(build_container())
