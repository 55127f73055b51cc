"""
Version information for safelife-store.

Keep in sync with setup.py.
"""

__version__ = "1.0.0"
__version_info__ = (1, 0, 0)
