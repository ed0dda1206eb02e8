"""flatstore.codecs

Serializers that turn the record mapping into file bytes and back:
- JsonCodec: a single JSON object, pretty-printed (tab indent by default)
- YamlCodec: a single YAML mapping in block style

Both treat an empty (or whitespace-only) file as an empty mapping so that a
freshly created store file opens cleanly.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, ClassVar, Mapping

import yaml

from .errors import DecodeError, EncodeError, UnsupportedFormat
from .interfaces import Codec

logger = logging.getLogger(__name__)


def _text(raw: bytes, fmt: str, store_name: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(store_name, fmt, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e


def _as_mapping(doc: Any, fmt: str, store_name: str) -> dict[str, Any]:
    if not isinstance(doc, dict):
        raise DecodeError(store_name, fmt, f"top-level value is {type(doc).__name__}, expected a mapping")
    bad = [k for k in doc if not isinstance(k, str)]
    if bad:
        raise DecodeError(store_name, fmt, f"non-string record key {bad[0]!r}")
    return doc


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not valid JSON")


def _check_keys(value: Any) -> None:
    # json.dumps would silently stringify int/float/bool/None keys.
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError(f"mapping key {k!r} is not a string")
            _check_keys(v)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _check_keys(item)


@dataclass(frozen=True)
class JsonCodec:
    indent: int | str = "\t"
    sort_keys: bool = True
    name: ClassVar[str] = "json"

    def decode(self, raw: bytes, *, store_name: str = "") -> dict[str, Any]:
        text = _text(raw, self.name, store_name)
        # new file
        if not text.strip():
            return {}
        try:
            doc = json.loads(text, parse_constant=_reject_constant)
        except ValueError as e:
            raise DecodeError(store_name, self.name, str(e)) from e
        return _as_mapping(doc, self.name, store_name)

    def encode(self, records: Mapping[str, Any], *, store_name: str = "") -> bytes:
        try:
            _check_keys(dict(records))
            text = json.dumps(
                dict(records),
                indent=self.indent,
                sort_keys=self.sort_keys,
                ensure_ascii=False,
                allow_nan=False,
            )
            return (text + "\n").encode("utf-8")
        except (TypeError, ValueError, RecursionError) as e:
            raise EncodeError(store_name, self.name, str(e)) from e


@dataclass(frozen=True)
class YamlCodec:
    indent: int | str = 2
    sort_keys: bool = True
    name: ClassVar[str] = "yaml"

    def decode(self, raw: bytes, *, store_name: str = "") -> dict[str, Any]:
        text = _text(raw, self.name, store_name)
        if not text.strip():
            return {}
        try:
            doc = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise DecodeError(store_name, self.name, str(e)) from e
        # a document holding only `~` / `null`
        if doc is None:
            return {}
        return _as_mapping(doc, self.name, store_name)

    def encode(self, records: Mapping[str, Any], *, store_name: str = "") -> bytes:
        # YAML block indentation must be a small integer; tab indents are a JSON-only option.
        indent = self.indent if isinstance(self.indent, int) else None
        try:
            return yaml.safe_dump(
                dict(records),
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=self.sort_keys,
                indent=indent,
                encoding="utf-8",
            )
        except (yaml.YAMLError, TypeError, ValueError, RecursionError) as e:
            raise EncodeError(store_name, self.name, str(e)) from e


_REGISTRY: dict[str, Callable[..., Codec]] = {
    "json": JsonCodec,
    "yaml": YamlCodec,
}

_ALIASES = {"yml": "yaml"}


def _normalize(fmt: object) -> str:
    if not isinstance(fmt, str):
        raise UnsupportedFormat(fmt, available_formats())
    key = fmt.strip().lower()
    return _ALIASES.get(key, key)


def register_codec(fmt: str, factory: Callable[..., Codec]) -> None:
    """
    Make a new format selectable through StoreConfig.format.

    `factory` is called with the JSON/YAML formatting keywords (indent,
    sort_keys) and must return an object satisfying the Codec protocol.
    """
    key = _normalize(fmt)
    if not key:
        raise ValueError("format name must not be empty")
    if key in _REGISTRY:
        logger.debug("replacing codec registered for %r", key)
    _REGISTRY[key] = factory


def available_formats() -> list[str]:
    return sorted(_REGISTRY)


def get_codec(fmt: object, **options: Any) -> Codec:
    key = _normalize(fmt)
    factory = _REGISTRY.get(key)
    if factory is None:
        raise UnsupportedFormat(fmt, available_formats())
    return factory(**options)


def format_for_path(path: str | Path) -> str:
    suffix = Path(path).suffix.lower()
    if suffix in (".yaml", ".yml"):
        return "yaml"
    return "json"
