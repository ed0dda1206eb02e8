from __future__ import annotations

from typing import Any, Mapping, Protocol


class Codec(Protocol):
    """
    Pluggable serializer for one file format.

    Codecs are stateless apart from their formatting options; the same
    instance may be shared by any number of stores.
    """

    name: str

    def decode(self, raw: bytes, *, store_name: str = "") -> dict[str, Any]:
        """Decode the raw file contents. Empty input is an empty mapping."""
        ...

    def encode(self, records: Mapping[str, Any], *, store_name: str = "") -> bytes:
        """Encode the full mapping into the bytes written to disk."""
        ...
