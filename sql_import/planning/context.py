"""Run-scoped key/value store handed from planning to the extraction stages."""

from typing import Any

from ..connections._logging import get_logger, redact_config

LOGGER = get_logger("planning.context")


class RunContext:
    """Write-once string/integer store for one import job execution."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._values: dict[str, Any] = dict(initial or {})

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def _set(self, key: str, value: Any) -> None:
        if key in self._values:
            raise KeyError(f"Context key '{key}' is already set")
        self._values[key] = value

    def set_string(self, key: str, value: str | None) -> None:
        if value is not None and not isinstance(value, str):
            raise TypeError(f"Context key '{key}' expects a string, got {type(value).__name__}")
        self._set(key, value)

    def set_integer(self, key: str, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Context key '{key}' expects an integer, got {type(value).__name__}")
        self._set(key, value)

    def get_string(self, key: str, default: str | None = None) -> str | None:
        value = self._values.get(key, default)
        return None if value is None else str(value)

    def get_integer(self, key: str, default: int | None = None) -> int | None:
        value = self._values.get(key, default)
        return None if value is None else int(value)

    def as_dict(self, *, redact: bool = False) -> dict[str, Any]:
        values = dict(self._values)
        return redact_config(values) if redact else values

    def __repr__(self) -> str:
        return f"RunContext({redact_config(self._values)!r})"
