"""In-memory key-value storage adapter."""


class MemoryKeyValueStore:
    """Implements KeyValueStore protocol with a plain dict."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value
