"""Reference analysis: which named values an expression needs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from checkrules.diagnostics import Diagnostic, Diagnostics

_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")
_INDEX = re.compile(r"^[0-9]+$")

_INVALID_REFERENCE = "Invalid reference"

_ATTRIBUTE_ROOTS = {
    "count": ("index",),
    "each": ("key", "value"),
    "path": ("module", "root", "cwd"),
    "terraform": ("workspace",),
}


@dataclass(frozen=True)
class Reference:
    """A parsed traversal: the referenced object plus any attribute path."""

    subject: str
    remaining: tuple[str, ...] = ()

    @property
    def traversal(self) -> str:
        return ".".join((self.subject, *self.remaining))


def _invalid(detail: str) -> Diagnostics:
    diags = Diagnostics()
    diags.append(Diagnostic.error(_INVALID_REFERENCE, detail))
    return diags


def parse_ref(traversal: str) -> tuple[Reference | None, Diagnostics]:
    parts = traversal.split(".")
    if not _NAME.match(parts[0]):
        return None, _invalid(f'A reference must begin with a name, not "{parts[0]}".')
    for part in parts[1:]:
        if not (_NAME.match(part) or _INDEX.match(part)):
            return None, _invalid(f'"{traversal}" is not a valid reference.')

    root = parts[0]

    if root in _ATTRIBUTE_ROOTS:
        allowed = _ATTRIBUTE_ROOTS[root]
        if len(parts) == 1:
            return None, _invalid(
                f'The "{root}" object cannot be accessed directly. '
                "Instead, access one of its attributes."
            )
        if parts[1] not in allowed:
            return None, _invalid(f'The "{root}" object does not have an attribute named "{parts[1]}".')
        return Reference(f"{root}.{parts[1]}", tuple(parts[2:])), Diagnostics()

    if root == "self":
        return Reference("self", tuple(parts[1:])), Diagnostics()

    if root in ("var", "local", "module"):
        if len(parts) < 2:
            return None, _invalid(
                f'The "{root}" object cannot be accessed directly. '
                "Instead, access one of its attributes."
            )
        return Reference(f"{root}.{parts[1]}", tuple(parts[2:])), Diagnostics()

    if root == "data":
        if len(parts) < 3:
            return None, _invalid(
                "A reference to a data source must be followed by the data source type and name."
            )
        return Reference(".".join(parts[:3]), tuple(parts[3:])), Diagnostics()

    # managed resource: <type>.<name>
    if len(parts) < 2:
        return None, _invalid(
            "A reference to a resource type must be followed by at least one "
            "attribute access, specifying the resource name."
        )
    return Reference(".".join(parts[:2]), tuple(parts[2:])), Diagnostics()


def references_in_expr(expr: Any) -> tuple[list[Reference], Diagnostics]:
    """Parse every traversal in expr. Invalid ones are reported and dropped."""
    diags = Diagnostics()
    if expr is None:
        return [], diags

    refs: list[Reference] = []
    seen: set[Reference] = set()
    for traversal in expr.variables():
        ref, more = parse_ref(traversal)
        diags.extend(more)
        if ref is None or ref in seen:
            continue
        seen.add(ref)
        refs.append(ref)
    return refs, diags
