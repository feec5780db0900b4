"""Renderers, route helpers, responses, sessions, background jobs and WSGI servers."""

__version__ = "1.1.0"