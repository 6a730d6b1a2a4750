"""Kost console package.

Holds the FastAPI service that emits payment notifications and the
``kost_console.client`` package that consumes them in real time.
"""
