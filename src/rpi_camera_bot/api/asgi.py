"""ASGI entrypoint for webhook deployments."""

from rpi_camera_bot.api.app import create_app
from rpi_camera_bot.containers import build_container

app = create_app(build_container())
