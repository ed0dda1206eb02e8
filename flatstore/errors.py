from __future__ import annotations


class FlatStoreError(Exception):
    """Base class for every error raised by flatstore itself.

    I/O failures are not wrapped: they surface as the builtin OSError.
    """


class DecodeError(FlatStoreError, ValueError):
    def __init__(self, store_name: str, fmt: str, reason: str):
        self.store_name = store_name
        self.fmt = fmt
        super().__init__(f"{store_name}: malformed {fmt} content: {reason}")


class EncodeError(FlatStoreError, ValueError):
    def __init__(self, store_name: str, fmt: str, reason: str):
        self.store_name = store_name
        self.fmt = fmt
        super().__init__(f"{store_name}: cannot encode records as {fmt}: {reason}")


class NoRecord(FlatStoreError, KeyError):
    """
    Raised by read/delete for an absent key.

    This is an expected condition; callers handle it as control flow.
    """

    def __init__(self, key: str, store_name: str | None = None):
        self.key = key
        self.store_name = store_name
        super().__init__(key)

    def __str__(self) -> str:
        if self.store_name:
            return f"{self.store_name}: record {self.key!r} doesn't exist"
        return f"record {self.key!r} doesn't exist"


class UnsupportedFormat(FlatStoreError, ValueError):
    def __init__(self, fmt: object, available: list[str] | None = None):
        self.fmt = fmt
        self.available = list(available or [])
        msg = f"no codec registered for format {fmt!r}"
        if self.available:
            msg += f" (available: {', '.join(self.available)})"
        super().__init__(msg)


class StoreClosed(FlatStoreError, RuntimeError):
    def __init__(self, store_name: str):
        self.store_name = store_name
        super().__init__(f"{store_name}: store is closed")
