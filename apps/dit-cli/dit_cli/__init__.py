"""Dit CLI - command line front end for the dit replication engine."""

__version__ = "0.1.0"
