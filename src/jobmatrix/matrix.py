# matrix.py
"""
Matrix arguments and their explosion into step instances.

Example:
    mas = MatrixArgs({"x": ["1", "2"], "y": ["3", "4"]})
    mas.instances()
    # [ { 'x': 1,'y': 3 }, { 'x': 2,'y': 3 }, { 'x': 1,'y': 4 }, { 'x': 2,'y': 4 } ]

A shell step is then run once per instance with:
    PGQ_INSTANCE_X=1 PGQ_INSTANCE_Y=3 {SCRIPT}
    ...
and a query step `select fn_myfunc(:x, :y)` once per instance as:
    select fn_myfunc($1, $2)   args: ["1", "3"]
    ...

Argument names are always folded and rendered in sorted order so the same
matrix produces the same instances, env and placeholder numbering every time.
"""
from __future__ import annotations

import math
import re
from typing import Dict, Iterable, List, Tuple

from .errors import EnvNameCollisionError, PlaceholderCollisionError, UnboundPlaceholderError

MATRIX_INSTANCE_PREFIX = "PGQ_INSTANCE"

# a :name placeholder, but not the second colon of a ::type cast
_ANY_PLACEHOLDER = re.compile(r"(?<!:):([A-Za-z_]\w*)")

# 'string' (with '' escapes), "identifier" and $tag$ body $tag$ spans
_LITERAL = re.compile(
    r"'(?:[^']|'')*'"
    r'|"(?:[^"]|"")*"'
    r"|(\$(?:[A-Za-z_]\w*)?\$).*?\1",
    re.S,
)


def _placeholder(name: str) -> re.Pattern:
    return re.compile(r"(?<!:):" + re.escape(name) + r"(?!\w)")


def _split_literals(query: str) -> List[Tuple[bool, str]]:
    """Split a query into (is_code, text) chunks; placeholders only count in code."""
    chunks: List[Tuple[bool, str]] = []
    pos = 0
    for m in _LITERAL.finditer(query):
        if m.start() > pos:
            chunks.append((True, query[pos:m.start()]))
        chunks.append((False, m.group(0)))
        pos = m.end()
    if pos < len(query):
        chunks.append((True, query[pos:]))
    return chunks


def _quote(s: str) -> str:
    return s.replace("'", "''")


class InstanceArguments(dict):
    """
    key=value pairs extrapolated from MatrixArgs.
    One InstanceArguments is passed to one step instance.
    """

    def __str__(self) -> str:
        key_values = [f"'{_quote(key)}': {_quote(self[key])}" for key in sorted(self)]
        return "{ %s }" % ",".join(key_values)

    def clone(self) -> InstanceArguments:
        return InstanceArguments(self)

    def as_env(self) -> List[str]:
        """Render as NAME=value strings, e.g. ["PGQ_INSTANCE_X=1"]."""
        return [f"{name}={value}" for name, value in self.as_env_dict().items()]

    def as_env_dict(self) -> Dict[str, str]:
        env: Dict[str, str] = {}
        owners: Dict[str, str] = {}
        for key in sorted(self):
            name = f"{MATRIX_INSTANCE_PREFIX}_{key.upper()}"
            if name in owners:
                raise EnvNameCollisionError(
                    code="E_ENV_COLLISION",
                    message=f"arguments {owners[name]!r} and {key!r} both map to {name}",
                    arg=key,
                    details={"variable": name},
                )
            owners[name] = key
            env[name] = self[key]
        return env

    def parse_query(self, query: str, *, strict: bool = True) -> Tuple[str, List[str]]:
        """
        Convert a query with named arguments (:name) into one with numbered
        arguments ($1, $2, ...).

        Every occurrence of a placeholder gets the same number; numbers are
        handed out per argument name, in sorted name order, and only for names
        that occur in the query. Text inside quoted strings, quoted identifiers
        and dollar-quoted bodies is never a placeholder. Returns the rewritten
        query and the values in placeholder order, ready for a
        positional-parameter execute call.

        Raises:
            PlaceholderCollisionError: two bound names found in the query
                cannot be separated (e.g. :x and :x-y).
            UnboundPlaceholderError: strict and a :name placeholder is left
                with no value.
        """
        chunks = _split_literals(query)
        code = [text for is_code, text in chunks if is_code]

        found = [name for name in sorted(self) if any(_placeholder(name).search(c) for c in code)]
        _check_collisions(found, query)

        parts: List[str] = []
        rewritten: List[str] = []
        for is_code, text in chunks:
            if is_code:
                for i, name in enumerate(found, start=1):
                    text = _placeholder(name).sub(f"${i}", text)
                rewritten.append(text)
            parts.append(text)
        parsed = "".join(parts)
        args: List[str] = [self[name] for name in found]

        if strict:
            leftover = sorted({m.group(1) for c in rewritten for m in _ANY_PLACEHOLDER.finditer(c)})
            if leftover:
                raise UnboundPlaceholderError(
                    code="E_UNBOUND_PLACEHOLDER",
                    message=f"query has placeholders without a value: {', '.join(':' + n for n in leftover)}",
                    arg=leftover[0],
                    details={"bound": sorted(self)},
                )

        return parsed, args


def _check_collisions(found: List[str], query: str) -> None:
    for short in found:
        for long in found:
            if long == short or not long.startswith(short):
                continue
            # :x(?!\w) still matches the head of :x-y
            if not re.match(r"\w", long[len(short)]):
                raise PlaceholderCollisionError(
                    code="E_PLACEHOLDER_COLLISION",
                    message=f"placeholder :{short} is ambiguous with :{long}",
                    arg=short,
                    details={"query": query},
                )


class Instances(list):
    """
    What is run multiple times with different arguments for every step.
    Every step is run once per InstanceArguments; instances may run in parallel.
    """

    def __str__(self) -> str:
        return "[ %s ]" % ", ".join(str(ia) for ia in self)


class MatrixArgValues(list):
    """All the values one matrix argument can take."""

    def explode(self, key: str, collected: Iterable[InstanceArguments]) -> Instances:
        collected = list(collected)
        exploded = Instances()
        # value is the outer loop: existing instances vary fastest
        for value in self:
            for ia in collected:
                ia = ia.clone()
                ia[key] = value
                exploded.append(ia)
        return exploded


class MatrixArgs(dict):
    """
    Matrix arguments: argument name -> MatrixArgValues.

    Names are prefixed and uppercased for shell steps (PGQ_INSTANCE_<NAME>)
    and turned into numbered arguments for query steps.
    """

    def __init__(self, *args, **kwargs):
        super().__init__()
        self.update(*args, **kwargs)

    def __setitem__(self, key: str, values: Iterable[object]) -> None:
        if isinstance(values, str):
            raise TypeError(f"matrix argument {key!r} needs a list of values, got a string: {values!r}")
        super().__setitem__(key, MatrixArgValues(str(v) for v in values))

    # dict's own update/setdefault/|= bypass __setitem__
    def update(self, *args, **kwargs) -> None:
        for key, values in dict(*args, **kwargs).items():
            self[key] = values

    def setdefault(self, key: str, values: Iterable[object] = ()) -> MatrixArgValues:
        if key not in self:
            self[key] = values
        return self[key]

    def __ior__(self, other):
        self.update(other)
        return self

    @classmethod
    def from_pairs(cls, specs: Iterable[str]) -> MatrixArgs:
        """
        Parse ["x=1,2", "y=3"] into {"x": ["1", "2"], "y": ["3"]}.
        A repeated name adds values; "x=" gives x an empty value list.
        """
        mas = cls()
        for spec in specs:
            name, sep, raw = spec.partition("=")
            name = name.strip()
            if not sep or not name:
                raise ValueError(f"Invalid matrix argument {spec!r}, expected name=value[,value...]")
            values = raw.split(",") if raw else []
            mas[name] = list(mas.get(name, [])) + values
        return mas

    def size(self) -> int:
        """Number of instances instances() will produce."""
        return math.prod(len(values) for values in self.values())

    def instances(self) -> Instances:
        """
        Explode into one InstanceArguments per combination of values.

        No arguments gives a single empty instance (the step runs once);
        an empty value list anywhere gives no instances at all.
        """
        # seeding with the empty instance makes the first fold produce one
        # singleton per value
        ias = Instances([InstanceArguments()])
        for arg in sorted(self):
            ias = MatrixArgValues(self[arg]).explode(arg, ias)
        return ias
