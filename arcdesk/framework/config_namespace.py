"""Strict config reader.

Every key read is recorded; `assert_consumed()` then rejects whatever the parser
never asked for, so typos fail loudly instead of being ignored.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable

_MISSING = object()


class ConfigNamespace:
    def __init__(self, data: Mapping[str, Any], path: str = ""):
        self.data = dict(data)
        self.path = path
        self._read: set[str] = set()
        self._children: dict[str, ConfigNamespace] = {}

    def _key_path(self, key: str) -> str:
        return f"{self.path}.{key}" if self.path else key

    def _take(self, key: str, default: Any) -> tuple[str, Any]:
        if not isinstance(key, str) or not key.strip():
            raise TypeError("ConfigNamespace key must be a non-empty string")
        key = key.strip()
        self._read.add(key)
        value = self.data.get(key)
        if value is not None:
            return key, value
        # An explicit null counts as missing.
        if default is _MISSING:
            raise ValueError(f"Missing required config key: {self._key_path(key)}")
        return key, default

    def _type_error(self, key: str, expected: str, value: Any) -> TypeError:
        return TypeError(f"{self._key_path(key)} must be {expected} (type={type(value).__name__})")

    def unconsumed_keys(self) -> tuple[str, ...]:
        return tuple(sorted(str(key) for key in self.data if key not in self._read))

    def assert_consumed(self) -> None:
        unknown = self.unconsumed_keys()
        if unknown:
            consumed = ", ".join(sorted(self._read)) or "<none>"
            raise ValueError(
                f"Unknown config keys under {self.path or '<root>'}: {', '.join(unknown)} "
                f"(consumed: {consumed})"
            )
        for child in self._children.values():
            child.assert_consumed()

    def namespace(self, key: str, *, required: bool = False) -> "ConfigNamespace":
        if isinstance(key, str) and key.strip() in self._children:
            return self._children[key.strip()]

        key, raw = self._take(key, None)
        if raw is None:
            if required:
                raise ValueError(f"Missing required config namespace: {self._key_path(key)}")
            raw = {}
        if not isinstance(raw, Mapping):
            raise TypeError(f"{self._key_path(key)} must be a mapping (type={type(raw).__name__})")

        child = ConfigNamespace(raw, path=self._key_path(key))
        self._children[key] = child
        return child

    def get_bool(self, key: str, *, default: bool | object = _MISSING) -> bool:
        key, value = self._take(key, default)
        if not isinstance(value, bool):
            raise self._type_error(key, "a boolean", value)
        return value

    def get_float(
        self,
        key: str,
        *,
        default: float | object = _MISSING,
        min_value: float | None = None,
        exclusive_min: bool = False,
    ) -> float:
        key, raw = self._take(key, default)
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise self._type_error(key, "a float", raw)

        value = float(raw)
        if min_value is None:
            return value
        if value < min_value or (exclusive_min and value == min_value):
            op = ">" if exclusive_min else ">="
            raise ValueError(f"{self._key_path(key)} must be {op} {float(min_value)} (got {value})")
        return value

    def get_str(
        self,
        key: str,
        *,
        default: str | None | object = _MISSING,
        choices: Iterable[str] | None = None,
    ) -> str | None:
        key, raw = self._take(key, default)
        if raw is None:
            return None
        if not isinstance(raw, str):
            raise self._type_error(key, "a string", raw)

        value = raw.strip()
        if not value:
            raise ValueError(f"{self._key_path(key)} cannot be empty")
        if choices is not None:
            allowed = sorted({str(choice).strip() for choice in choices})
            if value not in allowed:
                raise ValueError(
                    f"{self._key_path(key)} must be one of: {', '.join(allowed)} (got {value!r})"
                )
        return value
