"""
Survey Engine Package

Survey/Response data model, the stores that own those collections, and the
analytics aggregation engine that turns raw response records into
per-survey and cross-survey statistics.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - Page rendering or layout
    - Routing between views
    - Authentication (consumed as a boolean capability check)
    - Physical storage (consumed as a load-all/save-all adapter)

Stores own state. Analytics reads snapshots. Exports are text.
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
