"""The moderation blueprint."""

from flask import Blueprint

bp = Blueprint("moderation", __name__, url_prefix="/events/posts")

from . import routes  # noqa: E402

__all__ = ["routes"]
