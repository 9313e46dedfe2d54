"""ASGI entrypoint for the photo submissions API."""

from photo_submissions.api.app import create_app
from photo_submissions.containers import build_container

app = create_app(build_container())
