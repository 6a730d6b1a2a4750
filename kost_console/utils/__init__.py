"""Shared helpers for the server side of the console."""

from .clock import WIB, get_app_timezone, now_for_db, now_local, to_db, to_local

__all__ = ["WIB", "get_app_timezone", "now_for_db", "now_local", "to_db", "to_local"]
