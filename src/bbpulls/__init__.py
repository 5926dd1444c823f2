"""bbpulls: pull-request accessors for the Bitbucket Cloud 2.0 API."""

__version__ = "0.1.0"
