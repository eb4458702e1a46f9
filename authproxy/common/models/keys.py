from typing import NamedTuple


class NamespacedName(NamedTuple):
    """Identifies a namespaced object."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"
