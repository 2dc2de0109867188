"""PubSentinel — Flutter dependency drift checker for a fleet of repositories."""

__version__ = "0.1.0"
