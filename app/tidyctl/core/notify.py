"""Completion notifications.

After a run, a success notification or a failure notification with the
caller's severity is raised through ``notify-send`` when it is
available. Without it, the notification is written to the log.
"""

import logging
import subprocess

from tidyctl.core.config import Severity
from tidyctl.models.outcome import ResultKind, RunResult
from tidyctl.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

APP_TITLE = "tidyctl"

_LOG_LEVELS: dict[str, int] = {
    "low": logging.INFO,
    "normal": logging.WARNING,
    "critical": logging.ERROR,
}


def summarize(result: RunResult) -> str:
    """Build the one-line notification body for a run.

    Args:
        result: Completed run.

    Returns:
        Summary such as "3 rule(s): 5 succeeded, 1 skipped, 0 failed".
    """
    counts = result.counts()
    return (
        f"{len(result.rules)} rule(s): "
        f"{counts[ResultKind.SUCCESS]} succeeded, "
        f"{counts[ResultKind.SKIPPED]} skipped, "
        f"{len(result.failures)} failed"
    )


class Notifier:
    """Raises completion notifications.

    Args:
        enabled: If False, notifications are only logged.
        failure_severity: Urgency used for failed runs.
    """

    def __init__(self, *, enabled: bool = True, failure_severity: Severity = "critical") -> None:
        self._enabled = enabled
        self._failure_severity: Severity = failure_severity

    def notify_result(self, result: RunResult) -> bool:
        """Send the success or failure notification for a run.

        Args:
            result: Completed run.

        Returns:
            True if a desktop notification was delivered.
        """
        if result.success:
            return self.send("Maintenance run succeeded", summarize(result), "low")
        return self.send("Maintenance run failed", summarize(result), self._failure_severity)

    def send(self, title: str, body: str, severity: Severity) -> bool:
        """Send one notification.

        Args:
            title: Notification title (prefixed with the app name).
            body: Notification body.
            severity: Urgency level.

        Returns:
            True if notify-send accepted the notification.
        """
        logger.log(_LOG_LEVELS[severity], "%s: %s", title, body)

        if not self._enabled or not command_exists("notify-send"):
            return False

        try:
            completed = run_command(
                [
                    "notify-send",
                    "--app-name",
                    APP_TITLE,
                    "--urgency",
                    severity,
                    f"{APP_TITLE}: {title}",
                    body,
                ],
                timeout=10.0,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Could not send notification: %s", e)
            return False

        if not completed.success:
            logger.warning("notify-send failed: %s", completed.stderr.strip())
        return completed.success
