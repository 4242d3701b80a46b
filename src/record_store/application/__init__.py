"""Application layer: wiring the services for callers such as the CLI."""

from .bootstrap import RecordStoreApp, create_app

__all__ = ["RecordStoreApp", "create_app"]
