# File: utils/__init__.py
"""Pure Python utilities for TaskFlow.

This module contains pure functions with no dependency on the rest of the
package, so they can be unit tested in isolation.

Submodules:
    - dt_utils: Date parsing, calendar arithmetic, weekday helpers

Usage:
    from . import dt_utils
    from .dt_utils import dt_add_interval
"""

from . import dt_utils

__all__ = ["dt_utils"]
