"""Literal fragment replacement for section regeneration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PatchResult:
    text: str
    applied: bool


def apply_section_patch(full_text: str, old_fragment: str, new_fragment: str) -> PatchResult:
    """Replace the first literal occurrence of ``old_fragment``.

    When the fragment is missing (or empty) the text comes back unchanged with
    ``applied=False``.
    """

    if not old_fragment:
        return PatchResult(full_text, False)
    index = full_text.find(old_fragment)
    if index < 0:
        return PatchResult(full_text, False)
    patched = full_text[:index] + new_fragment + full_text[index + len(old_fragment) :]
    return PatchResult(patched, True)
