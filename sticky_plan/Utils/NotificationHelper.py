# NotificationHelper.py
# Description: Short-lived toast notices for the sticky_plan Textual apps
#
# Imports
from typing import Optional
#
# Third-Party Imports
from textual.app import App
#
#######################################################################################################################
#
# Functions:

SEVERITIES = ("information", "warning", "error")
DEFAULT_TIMEOUT = 2.0


def show_notification(
    app: App,
    message: str,
    severity: str = "information",
    timeout: Optional[float] = None
) -> None:
    """
    Show a transient notification; never a blocking modal.

    Args:
        app: The app instance
        message: Message to display
        severity: Textual severity level (information, warning, error)
        timeout: Timeout in seconds
    """
    if severity not in SEVERITIES:
        severity = "information"
    if timeout is None:
        # Errors stay a little longer
        timeout = DEFAULT_TIMEOUT * 2 if severity == "error" else DEFAULT_TIMEOUT
    app.notify(message, severity=severity, timeout=timeout)

#
# End of NotificationHelper.py
#######################################################################################################################
