from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping, Optional

_TRUE_STRINGS = ("1", "true", "yes", "on")

# camelCase names accepted from API payloads -> dataclass field names
_ALIASES: dict[str, str] = {
    "includeAssets": "include_assets",
    "includeMetadata": "include_metadata",
    "includeAnimations": "include_animations",
    "includeComments": "include_comments",
    "extractImages": "extract_images",
    "includeNotes": "include_notes",
}


def _as_bool(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in _TRUE_STRINGS
    return bool(v)


@dataclass(frozen=True)
class ExtractionOptions:
    """Toggles for the optional, more expensive extraction branches.

    A missing toggle only omits its section from the output; it never fails.
    """

    include_assets: bool = True
    include_metadata: bool = False
    include_animations: bool = False
    include_comments: bool = False
    extract_images: bool = False
    include_notes: bool = True

    @classmethod
    def from_mapping(
        cls,
        mapping: Optional[Mapping[str, Any]],
        *,
        base: Optional["ExtractionOptions"] = None,
    ) -> "ExtractionOptions":
        """Build options from a loose mapping. Unknown keys are ignored."""
        start = base or cls()
        if not mapping:
            return start

        names = {f.name for f in dataclasses.fields(cls)}
        changes: dict[str, bool] = {}
        for key, value in mapping.items():
            name = _ALIASES.get(key, key)
            if name in names and value is not None:
                changes[name] = _as_bool(value)
        return dataclasses.replace(start, **changes)

    @property
    def embeds_image_data(self) -> bool:
        return self.extract_images and self.include_assets

    def to_dict(self) -> dict[str, bool]:
        inverse = {v: k for k, v in _ALIASES.items()}
        return {inverse[f.name]: getattr(self, f.name) for f in dataclasses.fields(self)}
