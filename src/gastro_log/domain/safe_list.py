"""Safe-list matching rules.

An entry matches an ingredient when either string contains the other, so
``"卵"`` covers ``"卵（アレルゲン）"`` and vice versa. Blank entries never
match anything.
"""


def normalize_entry(item: str) -> str:
    """Trim surrounding whitespace from a safe-list entry."""
    return item.strip()


def matches_entry(entry: str, ingredient: str) -> bool:
    """Return True when the entry and ingredient overlap by substring."""
    if not entry or not ingredient:
        return False
    return entry in ingredient or ingredient in entry


def is_in_safe_list(safe_list: list[str], ingredient: str) -> bool:
    """Return True when any safe-list entry matches the ingredient."""
    return any(matches_entry(entry, ingredient) for entry in safe_list)


def filter_ingredients(safe_list: list[str], ingredients: list[str]) -> list[str]:
    """Drop ingredients covered by the safe-list, keeping order."""
    return [name for name in ingredients if not is_in_safe_list(safe_list, name)]


def merge_safe_lists(remote: list[str], local: list[str]) -> list[str]:
    """Union two lists by exact string, remote entries first."""
    merged: list[str] = []
    for item in [*remote, *local]:
        if item not in merged:
            merged.append(item)
    return merged
