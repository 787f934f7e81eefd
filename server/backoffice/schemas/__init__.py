"""Pydantic schemas for request/response validation."""

from .common import *  # noqa: F403
from .health import *  # noqa: F403
from .transaction import *  # noqa: F403
from .travel_gallery import *  # noqa: F403
