"""telelog wiring for the interpreter.

Loggers are cached per name and share one ``telelog.Config``. Call
``configure`` to swap that config (explicitly or by preset name); the
cache is dropped so later ``get_logger`` calls pick it up.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, MutableMapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "VIM_GRAMMAR_"

_LOGGERS: MutableMapping[str, Any] = {}
_CONFIG: Optional[Any] = None


def env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def env_flag(name: str, default: bool) -> bool:
    raw = env(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def _debug_config(config: Any) -> None:
    config.with_min_level("DEBUG")
    config.with_console_output(True)
    config.with_colored_output(True)


def _quiet_config(config: Any) -> None:
    config.with_min_level("INFO")
    config.with_console_output(False)


_PRESETS: Dict[str, Callable[[Any], None]] = {
    "debug": _debug_config,
    "quiet": _quiet_config,
}


def _env_config() -> Any:
    config = tl.Config()
    config.with_min_level((env("LOG_LEVEL") or "INFO").upper())

    console = not env_flag("DISABLE_CONSOLE", False)
    config.with_console_output(console)
    if console:
        config.with_colored_output(not env_flag("NO_COLOR", False))
    if env_flag("LOG_JSON", False):
        config.with_json_format(True)

    log_file = env("LOG_FILE")
    if log_file:
        config.with_file_output(log_file)
    if env_flag("LOG_BUFFERED", False):
        config.with_buffering(True)
        config.with_buffer_size(int(env("LOG_BUFFER_SIZE") or "2048"))
    return config


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Install ``config``, or build one from ``preset`` (``"debug"``, ``"quiet"``).

    With neither argument the config is rebuilt from ``VIM_GRAMMAR_*``
    environment variables.
    """

    global _CONFIG
    if config is not None and preset is not None:
        raise ValueError("Provide either `config` or `preset`, not both.")

    if preset is not None:
        build = _PRESETS.get(preset.lower())
        if build is None:
            raise ValueError(f"Unknown telemetry preset '{preset}'.")
        config = tl.Config()
        build(config)
    elif config is None:
        config = _env_config()

    config.with_profiling(True)
    _CONFIG = config
    _LOGGERS.clear()


def get_logger(name: Optional[str] = None) -> Any:
    logger_name = name or env("LOGGER") or "vim_grammar"
    if logger_name not in _LOGGERS:
        if _CONFIG is None:
            configure()
        _LOGGERS[logger_name] = tl.Logger.with_config(logger_name, _CONFIG)
    return _LOGGERS[logger_name]


def _emit(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    name = str(level).lower()
    with_data = getattr(logger, f"{name}_with", None)
    if with_data is not None:
        pairs: List[Tuple[str, str]] = [(str(k), _text(v)) for k, v in payload.items()]
        with_data(message, pairs)
        return
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Log ``event::<name>`` with ``data`` as key/value pairs."""

    _emit(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        payload = {"span": self.span_name, **self.metadata, "reason": reason}
        if self.component_name:
            payload["component"] = self.component_name
        _emit(self.logger, "error", "span::fail", payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile the block as ``name`` and track it as a telelog component.

    ``component=True`` uses ``name`` as the component id. ``metadata`` is
    added to the logger context for the duration of the block.
    """

    log = get_logger(logger_name)
    component_name = name if component is True else component or None
    handle = SpanHandle(logger=log, span_name=name, component_name=component_name)
    for key, value in (metadata or {}).items():
        handle.add_metadata(key, value)
        log.add_context(key, handle.metadata[key])

    with ExitStack() as stack:
        if component_name:
            stack.enter_context(log.track_component(component_name))
        stack.enter_context(log.profile(name))
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise
        finally:
            for key in metadata or {}:
                log.remove_context(key)


__all__ = [
    "SpanHandle",
    "configure",
    "env",
    "env_flag",
    "get_logger",
    "record_event",
    "span",
]
