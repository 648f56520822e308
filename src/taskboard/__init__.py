"""Taskboard — multi-tenant task tracking API.

Users register, log in for an opaque bearer token, and manage their
projects and the tasks inside them. List endpoints share one
allow-listed filter/sort/include/paginate pipeline.
"""

__version__ = "0.1.0"
