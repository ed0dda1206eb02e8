from __future__ import annotations

from .codecs import JsonCodec, YamlCodec, available_formats, format_for_path, get_codec, register_codec
from .config import StoreConfig
from .errors import DecodeError, EncodeError, FlatStoreError, NoRecord, StoreClosed, UnsupportedFormat
from .interfaces import Codec
from .settings import Settings, get_settings
from .store import RecordStore, open_store

__all__ = [
    "RecordStore",
    "open_store",
    "StoreConfig",
    "Settings",
    "get_settings",
    "Codec",
    "JsonCodec",
    "YamlCodec",
    "get_codec",
    "register_codec",
    "available_formats",
    "format_for_path",
    "FlatStoreError",
    "DecodeError",
    "EncodeError",
    "NoRecord",
    "StoreClosed",
    "UnsupportedFormat",
]
