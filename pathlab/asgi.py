"""
ASGI config for the pathlab project.

Only HTTP is served; every endpoint is a plain request/response view.
"""
import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pathlab.settings")

application = get_asgi_application()
