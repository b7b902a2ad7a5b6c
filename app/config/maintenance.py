"""
Maintenance mode switch.

Set MAINTENANCE_MODE to True and redeploy to put the whole app behind the
maintenance page. Only /maintenance and the health probes keep answering.
Set it back to False to return to normal operation.
"""

MAINTENANCE_MODE = False

MAINTENANCE_MESSAGE = (
    "Acetrack is currently undergoing scheduled maintenance. "
    "Please check back shortly."
)

# Paths served even while maintenance mode is on
MAINTENANCE_ALLOWED_PATHS = ("/maintenance", "/health", "/ready")
