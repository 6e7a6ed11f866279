"""Configuration for residual_guard."""

from residual_guard.config.settings import GuardConfig, load_config

__all__ = ["GuardConfig", "load_config"]
