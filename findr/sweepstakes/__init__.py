"""The sweepstakes blueprint."""

from flask import Blueprint

bp = Blueprint("sweepstakes", __name__, url_prefix="/tasks/sweepstakes")

from . import routes  # noqa: E402

__all__ = ["routes"]
