"""OmniFocus automation over AppleScript."""

__version__ = "0.4.0"
