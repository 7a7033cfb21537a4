"""Category — stable identity and display attributes for tracked time.

A category's ``id`` is assigned once and never reused, so grains in the
sand grid keep pointing at "the same" category while its name, colour
or position in the list change.  ``CategoryTable`` keeps display order
separate from identity; the sand engine only ever looks categories up
by id and treats a missing id as orphaned rather than as an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, NewType

from strata.categories.palette import FALLBACK_COLOR, PALETTE, normalise

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

CategoryId = NewType("CategoryId", int)

# Largest id the grid can store; ids are non-negative
MAX_CATEGORY_ID = 2**63 - 1


def check_category_id(category_id: int) -> CategoryId:
    """Return ``category_id`` unchanged if it is a storable id.

    Raises:
        ValueError: If the id is negative or too large for the grid.
    """
    if not 0 <= category_id <= MAX_CATEGORY_ID:
        msg = f"category id must be in 0..{MAX_CATEGORY_ID}, got {category_id}"
        raise ValueError(msg)
    return CategoryId(category_id)


@dataclass(frozen=True)
class Category:
    """A user-defined bucket of tracked time.

    Attributes:
        id: Stable identifier, never renumbered.
        name: Display name (unique within a table, case-insensitive).
        description: Free-form note shown alongside the name.
        color_index: Index into ``PALETTE``.
        karma_effect: Sign/weight used by reports (-1, 0 or 1).  Carried
            through unchanged; the simulation ignores it.
    """

    id: CategoryId
    name: str
    description: str = ""
    color_index: int = 0
    karma_effect: int = 1


@dataclass
class CategoryTable:
    """Ordered collection of categories keyed by id.

    Attributes:
        next_id: Next id handed out by ``add``.  Only ever increases.
    """

    next_id: int = 0
    _by_id: dict[CategoryId, Category] = field(default_factory=dict, repr=False)
    _order: list[CategoryId] = field(default_factory=list, repr=False)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> CategoryTable:
        """Build a table from plain mappings (e.g. parsed YAML).

        Records without an ``id`` get the next free one.  Records whose
        id or (case-insensitive) name was already seen are skipped.

        Args:
            records: Mappings with ``name`` and optional ``id``,
                ``description``, ``color_index`` and ``karma_effect``.
        """
        table = cls()
        pending: list[Mapping[str, Any]] = []
        for record in records:
            if "id" in record:
                cid = CategoryId(int(record["id"]))
                if not 0 <= cid <= MAX_CATEGORY_ID:
                    continue
                if cid in table._by_id or table._has_name(record["name"]):
                    continue
                table._insert(
                    Category(
                        id=cid,
                        name=str(record["name"]).strip(),
                        description=str(record.get("description", "")),
                        color_index=normalise(
                            int(record.get("color_index", len(table) % len(PALETTE))),
                        ),
                        karma_effect=int(record.get("karma_effect", 1)),
                    ),
                )
                table.next_id = max(table.next_id, cid + 1)
            else:
                pending.append(record)

        for record in pending:
            if table._has_name(record["name"]):
                continue
            table.add(
                str(record["name"]),
                description=str(record.get("description", "")),
                color_index=record.get("color_index"),
                karma_effect=int(record.get("karma_effect", 1)),
            )
        return table

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Category]:
        return (self._by_id[cid] for cid in self._order)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id

    def ids(self) -> list[CategoryId]:
        """Return category ids in display order."""
        return list(self._order)

    def get(self, category_id: CategoryId | None) -> Category | None:
        """Look up a category, returning None when it is unknown."""
        if category_id is None:
            return None
        return self._by_id.get(category_id)

    def color_for(self, category_id: CategoryId | None) -> int:
        """Return the colour index for an id, or ``FALLBACK_COLOR``."""
        category = self.get(category_id)
        if category is None:
            return FALLBACK_COLOR
        return category.color_index

    def add(
        self,
        name: str,
        *,
        description: str = "",
        color_index: int | None = None,
        karma_effect: int = 1,
    ) -> CategoryId:
        """Create a category and append it to the display order.

        Args:
            name: Display name; surrounding whitespace is stripped.
            description: Optional description.
            color_index: Palette index.  Defaults to the next colour in
                rotation based on the current table size.
            karma_effect: Report weight carried with the category.

        Returns:
            The id assigned to the new category.

        Raises:
            ValueError: If the name is blank or already taken.
        """
        trimmed = name.strip()
        if not trimmed:
            msg = "category name must not be blank"
            raise ValueError(msg)
        if self._has_name(trimmed):
            msg = f"category {trimmed!r} already exists"
            raise ValueError(msg)

        if color_index is None:
            color_index = len(self._order)
        cid = CategoryId(self.next_id)
        self.next_id += 1
        self._insert(
            Category(
                id=cid,
                name=trimmed,
                description=description,
                color_index=normalise(color_index),
                karma_effect=karma_effect,
            ),
        )
        return cid

    def remove(self, category_id: CategoryId) -> Category:
        """Delete a category.  Its id is never handed out again.

        Raises:
            KeyError: If the id is unknown.
        """
        category = self._by_id.pop(category_id)
        self._order.remove(category_id)
        return category

    def move(self, category_id: CategoryId, offset: int) -> None:
        """Shift a category within the display order, clamped to the ends.

        Raises:
            KeyError: If the id is unknown.
        """
        if category_id not in self._by_id:
            raise KeyError(category_id)
        index = self._order.index(category_id)
        target = max(0, min(len(self._order) - 1, index + offset))
        self._order.insert(target, self._order.pop(index))

    def reordered(self, order: Iterable[CategoryId]) -> CategoryTable:
        """Return a copy of this table with a new display order.

        Args:
            order: Every id currently in the table, in the new order.

        Raises:
            ValueError: If ``order`` is not a permutation of the ids.
        """
        new_order = list(order)
        if sorted(new_order) != sorted(self._order):
            msg = "reorder must be a permutation of the existing ids"
            raise ValueError(msg)
        return CategoryTable(
            next_id=self.next_id,
            _by_id=dict(self._by_id),
            _order=new_order,
        )

    def recolor(self, category_id: CategoryId, color_index: int) -> None:
        """Change a category's palette colour.

        Raises:
            KeyError: If the id is unknown.
        """
        category = self._by_id[category_id]
        self._by_id[category_id] = replace(category, color_index=normalise(color_index))

    def rename(self, category_id: CategoryId, name: str) -> None:
        """Change a category's display name.

        Raises:
            KeyError: If the id is unknown.
            ValueError: If the new name is blank or taken by another id.
        """
        category = self._by_id[category_id]
        trimmed = name.strip()
        if not trimmed:
            msg = "category name must not be blank"
            raise ValueError(msg)
        if trimmed.lower() != category.name.lower() and self._has_name(trimmed):
            msg = f"category {trimmed!r} already exists"
            raise ValueError(msg)
        self._by_id[category_id] = replace(category, name=trimmed)

    def _has_name(self, name: str) -> bool:
        lowered = str(name).strip().lower()
        return any(c.name.lower() == lowered for c in self._by_id.values())

    def _insert(self, category: Category) -> None:
        self._by_id[category.id] = category
        self._order.append(category.id)
