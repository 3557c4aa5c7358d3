"""Bookstore catalogue service: HTML views and a JSON API over MongoDB."""

__version__ = "1.0.0"
