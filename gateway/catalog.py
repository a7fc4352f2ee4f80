# =============================================================================
# gateway/catalog.py  -  Tool Descriptor Catalog
# =============================================================================
#
# The catalog is the fixed, ordered list of tools a server advertises.  It is
# built once from a literal list when the server starts and is read-only
# afterwards: there is no register() to call later.
#
# Listing returns descriptors in the order they were given.  Lookup by name
# returns None for unknown tools; turning that into a user-visible error is
# the dispatcher's job.
# =============================================================================

from typing import Iterable, Iterator

from gateway.models import ToolDescriptor


class ToolCatalog:
    """Ordered, read-only collection of ToolDescriptors."""

    def __init__(self, descriptors: Iterable[ToolDescriptor]):
        ordered = tuple(descriptors)
        index: dict[str, ToolDescriptor] = {}
        for descriptor in ordered:
            if descriptor.name in index:
                raise ValueError(f"Duplicate tool name in catalog: {descriptor.name}")
            index[descriptor.name] = descriptor
        self._descriptors = ordered
        self._index = index

    def list(self) -> tuple[ToolDescriptor, ...]:
        """Every descriptor, exactly once, in registration order."""
        return self._descriptors

    def get(self, name: str) -> ToolDescriptor | None:
        return self._index.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(d.name for d in self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)
