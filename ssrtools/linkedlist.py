"""A sequence container with the operations of the server's linked list."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, List, Optional

__all__ = ["LinkedList"]


class LinkedList:
    """An ordered collection supporting front and back insertion,
    matching deletion, in-place modification and selection sort.
    """

    def __init__(self, items: Optional[Iterable[Any]] = None) -> None:
        self._items: List[Any] = list(items) if items is not None else []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"

    def add_back(self, data: Any) -> None:
        """Append ``data`` at the tail."""
        self._items.append(data)

    def add_front(self, data: Any) -> None:
        """Insert ``data`` at the head."""
        self._items.insert(0, data)

    def delete_node(self, data: Any, match: Callable[[Any, Any], Any]) -> bool:
        """Remove the first element for which ``match(element, data)`` is true.

        Returns whether an element was removed.
        """
        for position, item in enumerate(self._items):
            if match(item, data):
                del self._items[position]
                return True
        return False

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._items):
            raise IndexError(f"list index out of range: {index}")

    def delete_at(self, index: int) -> None:
        """Remove the element at ``index``; raise IndexError if out of range."""
        self._check_index(index)
        del self._items[index]

    def modify_at(self, index: int, data: Any) -> None:
        """Replace the element at ``index``; raise IndexError if out of range."""
        self._check_index(index)
        self._items[index] = data

    def have_same(self, data: Any, match: Callable[[Any, Any], Any]) -> bool:
        """Whether ``match(element, data)`` is true for some element."""
        return any(match(item, data) for item in self._items)

    def have_same_cmp(self, data: Any) -> bool:
        """Whether some element differs from ``data`` by direct comparison."""
        return any(item != data for item in self._items)

    def foreach(self, func: Callable[[Any], Any]) -> None:
        """Call ``func`` on every element, head to tail."""
        for item in self._items:
            func(item)

    def sort(self, greater: Callable[[Any, Any], Any]) -> None:
        """Selection sort; ``greater(a, b)`` is true when ``a`` belongs after ``b``."""
        items = self._items
        for start in range(len(items)):
            smallest = start
            for candidate in range(start + 1, len(items)):
                if greater(items[smallest], items[candidate]):
                    smallest = candidate
            if smallest != start:
                items[start], items[smallest] = items[smallest], items[start]

    def clear(self) -> None:
        """Remove every element."""
        self._items.clear()