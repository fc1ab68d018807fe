"""Resolution of the current torrent selector into an ``ids`` argument."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from trctl.utils.exceptions import SelectorParseWarning

IdsValue = Union[str, list[int], list[str]]

NO_MATCH: list[int] = [-1]
NO_TORRENT_MESSAGE = "No torrent specified! Please use the -t option first."


@dataclass(frozen=True)
class IdsResolution:
    """Outcome of resolving a selector.

    ``ids`` is ``None`` when the key must be omitted. ``warning`` is set when
    the selector could not be used; ``ids`` then matches nothing.
    """

    ids: IdsValue | None
    warning: SelectorParseWarning | None = None

    def apply(self, arguments: dict) -> None:
        """Attach ``ids`` to request arguments, or leave them untouched."""
        if self.ids is not None:
            arguments["ids"] = self.ids


def parse_number_range(text: str) -> list[int] | None:
    """Expand ``"1-3,7"`` to ``[1, 2, 3, 7]``.

    Duplicates keep their first position. Returns ``None`` when any section
    is empty, non-numeric, open-ended or descending.
    """
    numbers: list[int] = []
    seen: set[int] = set()
    for section in text.split(","):
        section = section.strip()
        if not section:
            return None
        if "-" in section:
            first, _, last = section.partition("-")
            if not (first.isdigit() and last.isdigit()):
                return None
            low, high = int(first), int(last)
            if low > high:
                return None
            values = range(low, high + 1)
        else:
            if not section.isdigit():
                return None
            values = range(int(section), int(section) + 1)
        for value in values:
            if value not in seen:
                seen.add(value)
                numbers.append(value)
    return numbers


def resolve_ids(selector: str | None, fallback: str | None = None) -> IdsResolution:
    """Resolve a selector (or its fallback) into an ``ids`` value. Never raises."""
    text = selector or fallback or ""

    if not text:
        return IdsResolution(list(NO_MATCH), SelectorParseWarning(NO_TORRENT_MESSAGE))

    if text == "active":
        return IdsResolution("recently-active")

    if text == "all":
        return IdsResolution(None)

    if text.isdigit() or "," in text or "-" in text:
        numbers = parse_number_range(text)
        if numbers is None:
            return IdsResolution(
                list(NO_MATCH),
                SelectorParseWarning(
                    f"Invalid torrent list \"{text}\"; nothing will match",
                    {"selector": text},
                ),
            )
        return IdsResolution(numbers)

    return IdsResolution([text])
