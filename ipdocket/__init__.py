"""
ipdocket - IP matter deadline and status-change notifications.

Tracks patent and trademark matters, classifies task deadlines by
urgency and dispatches deduplicated notifications:
- Daily urgent task notification job (overlap-guarded, run-logged)
- Matter status transition notifications
- Renewal cancellation on terminal matter statuses
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
