"""
Variable substitution for build templates.

Recognised tokens:
- ``${NAME}`` (name may contain dots)
- ``$NAME``
- ``$$`` as an escaped literal ``$``

A token whose name is not in the environment is left in the output exactly
as written. Resolution never raises for missing names.
"""

from __future__ import annotations

import re
from typing import Callable, Mapping

TemplateResolver = Callable[[str, Mapping[str, str]], str]

_VARIABLE = re.compile(r"\$(\{(?P<braced>[A-Za-z0-9_.]+)\}|(?P<bare>[A-Za-z0-9_]+)|\$)")


def resolve(template: str, env: Mapping[str, str]) -> str:
    """Substitute ``env`` values into ``template``."""

    def _replace(match: re.Match[str]) -> str:
        name = match.group("braced") or match.group("bare")
        if name is None:
            return "$"
        value = env.get(name)
        if value is None:
            return match.group(0)
        return str(value)

    return _VARIABLE.sub(_replace, template)
