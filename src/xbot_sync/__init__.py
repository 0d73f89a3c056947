"""xbot-sync: keep Xcode Server bots in sync with open GitHub pull requests."""

__version__ = "0.1.0"
