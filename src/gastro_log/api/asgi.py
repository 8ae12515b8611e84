"""ASGI entrypoint for the Gastro Log cloud API."""

from gastro_log.api.app import create_app
from gastro_log.containers import build_server_container

app = create_app(build_server_container())
