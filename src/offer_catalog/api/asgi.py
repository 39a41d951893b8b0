"""ASGI entrypoint for the offer catalog API."""

from offer_catalog.api.app import create_app
from offer_catalog.containers import build_container

app = create_app(build_container())
