"""Data models for record store."""

from .config import Config, load_config, save_config

__all__ = ["Config", "load_config", "save_config"]
