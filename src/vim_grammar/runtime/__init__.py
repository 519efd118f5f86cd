"""Runtime services: telelog-backed telemetry and environment settings."""

from . import telemetry
from .settings import InterpreterSettings

__all__ = ["telemetry", "InterpreterSettings"]
