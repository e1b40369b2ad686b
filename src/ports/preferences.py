from typing import Protocol


class PreferenceStorePort(Protocol):
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if never written."""
        ...

    def set(self, key: str, value: str) -> None: ...
