"""safelife - data access for the Coronasafe resource and subscription store."""

from .version import __version__, __version_info__
