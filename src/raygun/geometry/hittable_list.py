"""Ordered aggregate of hittable objects.

A HittableList owns its children, which are spheres or nested lists, so a
scene is a tree without cycles. The device side has no notion of nesting:
the tree is flattened depth-first into the sphere storage, and that order
is the order in which the closest-hit query tests primitives (ties in t go
to the earlier sphere).
"""

from collections.abc import Iterable, Iterator
from typing import Union

from raygun.geometry.sphere import Sphere


class HittableList:
    """An ordered collection of spheres and nested lists.

    Attributes:
        children: The owned children, in test order.
    """

    def __init__(self, children: Iterable["Hittable"] = ()) -> None:
        self._children: list[Hittable] = []
        for child in children:
            self.add(child)

    @property
    def children(self) -> tuple["Hittable", ...]:
        """The children in test order."""
        return tuple(self._children)

    def add(self, child: "Hittable") -> None:
        """Append a child.

        Raises:
            TypeError: If child is neither a Sphere nor a HittableList.
            ValueError: If child is this list or already contains it.
        """
        if not isinstance(child, (Sphere, HittableList)):
            raise TypeError(f"Expected Sphere or HittableList, got {type(child).__name__}")
        if child is self or (isinstance(child, HittableList) and child._contains(self)):
            raise ValueError("A HittableList cannot contain itself")
        self._children.append(child)

    def _contains(self, other: "HittableList") -> bool:
        return any(
            child is other or (isinstance(child, HittableList) and child._contains(other))
            for child in self._children
        )

    def flatten(self) -> Iterator[Sphere]:
        """Yield all spheres depth-first, in test order."""
        for child in self._children:
            yield from child.flatten()

    def __len__(self) -> int:
        return len(self._children)

    def __iter__(self) -> Iterator["Hittable"]:
        return iter(self._children)

    def __repr__(self) -> str:
        return f"HittableList({self._children!r})"


Hittable = Union[Sphere, HittableList]
