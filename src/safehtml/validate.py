"""Structural linting for authored HTML.

This is an advisory check built on a plain open/close tag stack. It does no
filtering and says nothing about safety; never use it as a gate in front of a
sink. Problems come back as data, never as exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .constants import STRUCTURE_VOID_ELEMENT_SET
from .tokenizer import tokenize
from .tokens import Tag


@dataclass(slots=True)
class StructureReport:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def check_structure(html: object) -> StructureReport:
    """Check tag balance.

    Errors: closing tags with nothing open, and closing tags that do not match
    the innermost open tag. Warnings: tags still open at the end of input.
    Void elements and `<x/>` tags never open anything.
    """
    errors: list[str] = []
    warnings: list[str] = []
    if not isinstance(html, str):
        return StructureReport(is_valid=True, errors=errors, warnings=warnings)

    stack: list[str] = []
    for token in tokenize(html):
        if type(token) is not Tag:
            continue
        name = token.name
        if name in STRUCTURE_VOID_ELEMENT_SET:
            continue
        if token.kind == Tag.START:
            if not token.self_closing:
                stack.append(name)
            continue
        if not stack:
            errors.append(f"Closing tag '{name}' without matching opening tag")
            continue
        expected = stack.pop()
        if expected != name:
            errors.append(f"Mismatched tags: expected '{expected}', found '{name}'")

    if stack:
        warnings.append(f"Unclosed tags: {', '.join(stack)}")

    return StructureReport(is_valid=not errors, errors=errors, warnings=warnings)
