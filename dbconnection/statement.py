"""Statement building: list-parameter expansion and type-tagged binding.

Templates use named `:name` placeholders. A parameter bound to a list is
replaced by one placeholder per element (`:ids` -> `:ids_0,:ids_1,...`) so it
can be used in `IN (...)` clauses. The finished statement is translated into
psycopg2's `%(name)s` style when bound.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)

MARKER = ":"

# Quoted strings, dollar-quoted bodies and comments are matched whole and left
# alone. A `:name` preceded by a colon or identifier character (`x::int`) is not
# a placeholder.
_TOKEN_RE = re.compile(
    r"""
    (?P<literal>
        '(?:[^']|'')*'
      | "(?:[^"]|"")*"
      | \$(?P<tag>(?:[A-Za-z_]\w*)?)\$.*?\$(?P=tag)\$
      | --[^\n]*
      | /\*.*?\*/
    )
    | (?<![:\w]):(?P<name>[A-Za-z_]\w*)
    """,
    re.VERBOSE | re.DOTALL,
)


def _sub_placeholders(template: str, repl) -> str:
    """Apply `repl(name)` to every placeholder outside literals and comments."""

    def _token(m):
        if m.group("name") is None:
            return m.group(0)
        return repl(m.group("name"))

    return _TOKEN_RE.sub(_token, template)


class ParamType(Enum):
    INT = "int"
    BOOL = "bool"
    STR = "str"


@dataclass(frozen=True)
class BoundParam:
    """A single scalar value bound to a placeholder."""

    name: str
    value: Any
    param_type: ParamType = ParamType.STR

    @property
    def key(self) -> str:
        return self.name[len(MARKER):]

    def coerced(self) -> Any:
        """Value handed to psycopg2, which adapts by Python type.

        INT values are narrowed to plain `int` so subclasses such as `IntEnum`
        reach the driver as numbers rather than enum members.
        """
        if self.param_type is ParamType.INT:
            return int(self.value)
        if self.param_type is ParamType.BOOL:
            return bool(self.value)
        return self.value


@dataclass(frozen=True)
class Statement:
    """Rewritten template plus its scalar-only parameters."""

    query: str
    params: tuple[BoundParam, ...] = ()

    def bind(self) -> tuple[str, dict]:
        """Return `(sql, values)` ready for `cursor.execute`."""
        sql = self.query.replace("%", "%%")
        sql = _sub_placeholders(sql, lambda name: f"%({name})s")
        return sql, {p.key: p.coerced() for p in self.params}


def placeholder_name(name: str) -> str:
    """Prefix the marker when the caller left it off."""
    return name if name.startswith(MARKER) else MARKER + name


def is_list_value(value) -> bool:
    if isinstance(value, (str, bytes, bytearray)):
        return False
    return isinstance(value, (list, tuple, Mapping))


def param_type(value) -> ParamType:
    # bool is an int subclass
    if isinstance(value, bool):
        return ParamType.BOOL
    if isinstance(value, int):
        return ParamType.INT
    return ParamType.STR


def _replace_placeholder(template: str, placeholder: str, replacement: str) -> str:
    return _sub_placeholders(
        template,
        lambda name: replacement if MARKER + name == placeholder else MARKER + name,
    )


def expand_params(template: str, params: Optional[Mapping] = None) -> tuple[str, dict]:
    """Expand list-valued parameters into numbered scalar placeholders.

    Returns the rewritten template and a new mapping keyed by marker-prefixed
    names holding only scalars. The caller's mapping is left untouched.

    An empty list becomes a single `<name>_0` placeholder bound to an empty
    string so `IN (...)` stays syntactically valid.
    """
    expanded = {}
    for name, value in (params or {}).items():
        placeholder = placeholder_name(name)
        if not is_list_value(value):
            expanded[placeholder] = value
            continue

        items = value.items() if isinstance(value, Mapping) else enumerate(value)
        names = []
        for key, item in items:
            element = f"{placeholder}_{key}"
            names.append(element)
            expanded[element] = item
        if not names:
            element = f"{placeholder}_0"
            names.append(element)
            expanded[element] = ""

        template = _replace_placeholder(template, placeholder, ",".join(names))

    return template, expanded


def build_statement(template: str, params: Optional[Mapping] = None) -> Statement:
    query, expanded = expand_params(template, params)
    bound = tuple(
        BoundParam(name=name, value=value, param_type=param_type(value))
        for name, value in expanded.items()
    )
    logger.debug("Built statement %r with params %s", query, [p.name for p in bound])
    return Statement(query=query, params=bound)
