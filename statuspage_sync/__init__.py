"""
Statuspage Sync — health reports to status page incidents.

Turns per-service health reports into incidents on a Statuspage-style
page: one open incident per service, escalated or de-escalated as the
service status changes, with a local SQLite mirror for restarts.
"""

__version__ = "1.0.0"
