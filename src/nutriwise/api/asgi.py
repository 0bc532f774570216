"""ASGI entrypoint for the NutriWise tracker API."""

from nutriwise.api.app import create_app
from nutriwise.containers import build_container

app = create_app(build_container())
