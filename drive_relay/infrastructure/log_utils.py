"""``log_message``: the one call the relay uses to write to its history log."""

from __future__ import annotations

import inspect

from drive_relay.logging_setup import level_from_name, relay_logger, tag_for


def log_message(msg: str, level: str = "INFO", tag: str | None = None, **kwargs) -> None:
    """Log ``msg`` at ``level``; without a ``tag`` one is picked from the calling module.

    Extra keyword arguments (``exc_info=True`` and friends) go straight to ``Logger.log``.
    """
    if tag is None:
        caller = inspect.currentframe().f_back
        tag = tag_for(caller.f_globals.get("__name__", ""))

    extra = dict(kwargs.pop("extra", None) or {}, tag=tag)
    relay_logger().log(level_from_name(level), msg, extra=extra, **kwargs)
