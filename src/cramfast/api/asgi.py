"""ASGI entrypoint for the Cramfast API."""

from cramfast.api.app import create_app
from cramfast.containers import build_container

app = create_app(build_container())
