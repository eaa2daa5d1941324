# logger.py
"""
Logging configuration for the Badminton Court Manager.

This module provides centralized logging setup. The setup_logging() function
should be called once at application startup (e.g., in 1_Setup.py).

All app modules should use the "app" namespace:
    import logging
    logger = logging.getLogger("app.module_name")

This keeps third-party library logs quiet while allowing granular control
over the app's own logging level via the LOG_LEVEL environment variable.
"""

import logging
import os
import sys

# App namespace prefix - all app loggers should use this
APP_LOGGER_NAME = "app"


def level_from_env(default: int = logging.INFO) -> int:
    """Reads the app logging level from the LOG_LEVEL environment variable."""
    name = os.environ.get("LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def setup_logging(app_level: int = logging.INFO) -> None:
    """
    Configure logging for the application.

    - Root logger is set to WARNING (keeps third-party libraries quiet)
    - App namespace logger ("app.*") is set to the specified level

    This should be called ONCE at application startup (entry point).

    Args:
        app_level: The logging level for app modules (default: INFO)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)

    # Avoid adding duplicate handlers if setup is called multiple times
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)  # Handler accepts all; loggers filter

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(app_level)


def log_matchup_debug(
    logger: logging.Logger,
    label: str,
    team_a: list,
    team_b: list,
    skill_diff: int,
    issues: list[str],
) -> None:
    """
    Log one evaluated 2v2 split in a consistent format.

    Args:
        logger: Logger instance to use
        label: Which group or split is being reported
        team_a: Players of the first team
        team_b: Players of the second team
        skill_diff: Absolute team skill difference
        issues: Rule violations of the split
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(
        "%s: %s vs %s (skill diff %s, %d issue(s))",
        label,
        [p.name for p in team_a],
        [p.name for p in team_b],
        skill_diff,
        len(issues),
    )
    for issue in issues:
        logger.debug("  - %s", issue)
