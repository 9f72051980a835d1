"""Structural diff between two presentation snapshots.

Two slide-matching strategies are supported:

* positional (default): slide *i* of the previous snapshot is compared with
  slide *i* of the current one. Extra slides on either side are reported as
  removed or added.
* identity: slides are matched by `slide_id`. Matched slides that left the
  longest order-preserving run are reported as reordered.

Within a matched slide pair, elements are always matched by id.
"""

from typing import Optional

from deck_monitor.models.change import RawDifference
from deck_monitor.models.enums import DifferenceKind, SlideMatching
from deck_monitor.models.snapshot import (
    ElementSnapshot,
    PresentationSnapshot,
    SlideSnapshot,
)
from deck_monitor.utils import structurally_equal


def longest_increasing_subsequence(values: list[int]) -> set[int]:
    """Returns the positions of one longest strictly increasing subsequence.

    Args:
        values: The sequence to scan.

    Returns:
        The set of positions in `values` that belong to the subsequence.
    """
    # tails[k] is the position ending the best run of length k + 1
    tails: list[int] = []
    parents: list[Optional[int]] = [None] * len(values)
    for pos, value in enumerate(values):
        lo, hi = 0, len(tails)
        while lo < hi:
            mid = (lo + hi) // 2
            if values[tails[mid]] < value:
                lo = mid + 1
            else:
                hi = mid
        if lo > 0:
            parents[pos] = tails[lo - 1]
        if lo == len(tails):
            tails.append(pos)
        else:
            tails[lo] = pos

    members: set[int] = set()
    cursor = tails[-1] if tails else None
    while cursor is not None:
        members.add(cursor)
        cursor = parents[cursor]
    return members


class DiffEngine:
    """Computes the ordered differences between two snapshots."""

    def __init__(self, slide_matching: SlideMatching = SlideMatching.POSITIONAL):
        self.slide_matching = SlideMatching(slide_matching)

    def diff(
        self, previous: PresentationSnapshot, current: PresentationSnapshot
    ) -> list[RawDifference]:
        """Compares two snapshots.

        Args:
            previous: The earlier snapshot.
            current: The later snapshot.

        Returns:
            Differences in reporting order. Empty when the snapshots are
            structurally identical.
        """
        if (
            previous.checksum is not None
            and previous.checksum == current.checksum
        ):
            return []
        if self.slide_matching == SlideMatching.IDENTITY:
            return self._diff_by_identity(previous, current)
        return self._diff_by_position(previous, current)

    def _diff_by_position(
        self, previous: PresentationSnapshot, current: PresentationSnapshot
    ) -> list[RawDifference]:
        differences: list[RawDifference] = []
        old_slides, new_slides = previous.slides, current.slides

        for index in range(len(new_slides), len(old_slides)):
            differences.append(
                _slide_difference(DifferenceKind.SLIDE_REMOVED, old_slides[index])
            )
        for index in range(len(old_slides), len(new_slides)):
            differences.append(
                _slide_difference(DifferenceKind.SLIDE_ADDED, new_slides[index])
            )
        for index in range(min(len(old_slides), len(new_slides))):
            differences.extend(
                self.compare_slides(old_slides[index], new_slides[index], index)
            )
        return differences

    def _diff_by_identity(
        self, previous: PresentationSnapshot, current: PresentationSnapshot
    ) -> list[RawDifference]:
        differences: list[RawDifference] = []
        old_by_id = {slide.slide_id: slide for slide in previous.slides}
        new_ids = {slide.slide_id for slide in current.slides}

        for slide in previous.slides:
            if slide.slide_id not in new_ids:
                differences.append(
                    _slide_difference(DifferenceKind.SLIDE_REMOVED, slide)
                )
        for slide in current.slides:
            if slide.slide_id not in old_by_id:
                differences.append(
                    _slide_difference(DifferenceKind.SLIDE_ADDED, slide)
                )

        matched = [
            (old_by_id[slide.slide_id], slide)
            for slide in current.slides
            if slide.slide_id in old_by_id
        ]
        in_order = longest_increasing_subsequence(
            [old.slide_index for old, _ in matched]
        )
        for pos, (old, new) in enumerate(matched):
            if pos not in in_order:
                differences.append(
                    RawDifference(
                        kind=DifferenceKind.SLIDE_REORDERED,
                        slide_index=new.slide_index,
                        slide_id=new.slide_id,
                        previous=old.slide_index,
                        current=new.slide_index,
                        previous_index=old.slide_index,
                    )
                )
        for old, new in matched:
            differences.extend(self.compare_slides(old, new, new.slide_index))
        return differences

    def compare_slides(
        self, old: SlideSnapshot, new: SlideSnapshot, slide_index: int
    ) -> list[RawDifference]:
        """Compares one matched slide pair, slide fields first."""
        differences: list[RawDifference] = []

        if not structurally_equal(old.background_info, new.background_info):
            differences.append(
                RawDifference(
                    kind=DifferenceKind.BACKGROUND_CHANGED,
                    slide_index=slide_index,
                    slide_id=new.slide_id,
                    previous=old.background_info,
                    current=new.background_info,
                )
            )
        if not structurally_equal(old.layout_info, new.layout_info):
            differences.append(
                RawDifference(
                    kind=DifferenceKind.LAYOUT_CHANGED,
                    slide_index=slide_index,
                    slide_id=new.slide_id,
                    previous=old.layout_info,
                    current=new.layout_info,
                )
            )

        old_elements = old.element_map()
        new_elements = new.element_map()

        for element in old.elements:
            if element.id not in new_elements:
                differences.append(
                    _element_difference(
                        DifferenceKind.ELEMENT_REMOVED,
                        slide_index,
                        new.slide_id,
                        element,
                        previous=element,
                    )
                )
        for element in new.elements:
            if element.id not in old_elements:
                differences.append(
                    _element_difference(
                        DifferenceKind.ELEMENT_ADDED,
                        slide_index,
                        new.slide_id,
                        element,
                        current=element,
                    )
                )
        for element in new.elements:
            if element.id in old_elements:
                differences.extend(
                    self.compare_elements(
                        old_elements[element.id],
                        element,
                        slide_index,
                        new.slide_id,
                    )
                )
        return differences

    def compare_elements(
        self,
        old: ElementSnapshot,
        new: ElementSnapshot,
        slide_index: int,
        slide_id: Optional[str] = None,
    ) -> list[RawDifference]:
        """Compares a matched element pair field by field.

        Yields at most one difference per field, in the order position,
        style, content, properties.
        """
        comparisons = [
            (DifferenceKind.POSITION_CHANGED, old.position, new.position),
            (DifferenceKind.STYLE_CHANGED, old.style, new.style),
            (DifferenceKind.CONTENT_CHANGED, old.content, new.content),
            (DifferenceKind.PROPERTIES_CHANGED, old.properties, new.properties),
        ]
        differences = []
        for kind, before, after in comparisons:
            if kind == DifferenceKind.CONTENT_CHANGED:
                changed = before != after
            else:
                changed = not structurally_equal(before, after)
            if changed:
                differences.append(
                    _element_difference(
                        kind,
                        slide_index,
                        slide_id,
                        new,
                        previous=before,
                        current=after,
                    )
                )
        return differences


def _slide_difference(
    kind: DifferenceKind, slide: SlideSnapshot
) -> RawDifference:
    is_removal = kind == DifferenceKind.SLIDE_REMOVED
    return RawDifference(
        kind=kind,
        slide_index=slide.slide_index,
        slide_id=slide.slide_id,
        previous=slide if is_removal else None,
        current=None if is_removal else slide,
    )


def _element_difference(
    kind: DifferenceKind,
    slide_index: int,
    slide_id: Optional[str],
    element: ElementSnapshot,
    previous=None,
    current=None,
) -> RawDifference:
    return RawDifference(
        kind=kind,
        slide_index=slide_index,
        slide_id=slide_id,
        element_id=element.id,
        element_type=element.type.value,
        previous=previous,
        current=current,
    )
