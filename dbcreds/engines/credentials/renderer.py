"""
Placeholder substitution for role SQL.

Placeholders are ``{{key}}`` tokens matched literally. Values go in as raw
text: the generated username usually lands in DDL positions such as
``CREATE LOGIN [{{name}}]`` where drivers cannot bind parameters.
"""

import re
from collections.abc import Mapping
from typing import Any

PLACEHOLDER_OPEN = "{{"
PLACEHOLDER_CLOSE = "}}"

# Keys supplied by the issuer for every request
ISSUER_PLACEHOLDERS = frozenset({"name", "password"})

_PLACEHOLDER_PATTERN = re.compile(r"\{\{([A-Za-z_][A-Za-z0-9_]*)\}\}")


def render_statement(statement: str, values: Mapping[str, str]) -> str:
    """Replace every ``{{key}}`` of *values* in *statement*; leave other text alone."""
    out = statement
    for key, value in values.items():
        out = out.replace(f"{PLACEHOLDER_OPEN}{key}{PLACEHOLDER_CLOSE}", value)
    return out


def find_placeholders(template: str) -> list[str]:
    """Return the distinct placeholder names in *template*, sorted."""
    return sorted({m.group(1) for m in _PLACEHOLDER_PATTERN.finditer(template)})


def check_role_template(template: str) -> list[dict[str, Any]]:
    """Warn about placeholders the issuer never fills in.

    Each warning is a dict with ``placeholder``, ``line`` and ``message``.
    Such tokens reach the database verbatim.
    """
    warnings: list[dict[str, Any]] = []
    for line_no, line_text in enumerate(template.split("\n"), start=1):
        for match in _PLACEHOLDER_PATTERN.finditer(line_text):
            name = match.group(1)
            if name in ISSUER_PLACEHOLDERS:
                continue
            warnings.append(
                {
                    "placeholder": name,
                    "line": line_no,
                    "message": (
                        f"'{{{{{name}}}}}' is not substituted at issuance time "
                        f"(known: {', '.join(sorted(ISSUER_PLACEHOLDERS))}); "
                        f"it will be sent to the database as-is."
                    ),
                }
            )
    return warnings
