"""Observability utilities for the mock marathon service."""
from .logger import log_event

__all__ = ["log_event"]
