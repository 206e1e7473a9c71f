from __future__ import annotations
import logging
import logging.handlers

from addonlens.app.settings import settings, settingsBool, settingsInt
from .formatters import DevFormatter, JsonFormatter
from .filters import RecurringSuppressFilter

__all__ = [
    "ROOT_LOGGER_NAME",
    "configureLogging",
]


ROOT_LOGGER_NAME = "addonlens"



def configureLogging(level: int | None = None) -> logging.Logger:
    """
    Configure the "addonlens" logger tree. The process root logger is left
    alone, since addonlens usually runs inside a host tool that owns it.

    Dev:
      - Console DEBUG
    Default:
      - Console WARNING
      - JSON file log when logging.filePath is set, with rotation
      - Recurring message suppression (toggle)
    """
    devMode = settingsBool("debug.devModeEnabled", False)
    if level is None:
        level = logging.DEBUG if devMode else logging.WARNING

    base = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(base.handlers):
        base.removeHandler(handler)
        handler.close()
    base.setLevel(level)
    base.propagate = False

    consoleHandler = logging.StreamHandler()
    consoleHandler.setLevel(level)
    consoleHandler.setFormatter(DevFormatter())
    handlers: list[logging.Handler] = [consoleHandler]

    filePath = settings("logging.filePath", None)
    if filePath:
        fileHandler = logging.handlers.RotatingFileHandler(
            str(filePath),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        fileHandler.setLevel(level)
        fileHandler.setFormatter(JsonFormatter())
        handlers.append(fileHandler)

    if settingsBool("debug.suppressRecurringMessages.enabled", True):
        levelName = str(settings("debug.suppressRecurringMessages.summaryLevel", "INFO")).upper()
        summaryLevel = getattr(logging, levelName, logging.INFO)

        suppressFilter = RecurringSuppressFilter(
            windowSeconds=settingsInt("debug.suppressRecurringMessages.windowSeconds", 60),
            maxPerWindow=settingsInt("debug.suppressRecurringMessages.maxPerWindow", 5),
            summaryLevel=summaryLevel,
        )
        for handler in handlers:
            handler.addFilter(suppressFilter)

    for handler in handlers:
        base.addHandler(handler)
    return base

