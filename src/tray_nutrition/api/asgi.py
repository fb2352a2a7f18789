"""ASGI entrypoint for the tray nutrition API."""

from tray_nutrition.api.app import create_app
from tray_nutrition.containers import build_container

app = create_app(build_container())
