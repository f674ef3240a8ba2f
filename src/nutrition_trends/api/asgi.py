"""ASGI entrypoint for the nutrition trends API."""

from nutrition_trends.api.app import create_app
from nutrition_trends.containers import build_container

app = create_app(build_container())
