"""Utility functions for telemetry and visualization."""

from .logger import DataLogger

__all__ = ['DataLogger']
