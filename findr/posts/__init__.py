"""The post notifications blueprint."""

from flask import Blueprint

bp = Blueprint("posts", __name__, url_prefix="/events/users")

from . import routes  # noqa: E402

__all__ = ["routes"]
