"""Name transform pipelines.

Operators configure how a backer name is cleaned up before it is turned into
a discount code. A pipeline is a chain of string operations::

    name | trim | first_word | upper
    name | replace(" ", "-") | slice(0, 12)
    return name;

The leading ``return``/``name`` and the trailing ``;`` are optional, so the
form's default ``return name;`` is the identity transform. Snippets are
parsed into a fixed set of operations and never executed as code.
"""
from __future__ import annotations
import ast
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, List, Tuple, Union

from .errors import TransformError
from .normalize import fold_ascii


ERROR_PREFIX = "Transform function error: "

Arg = Union[str, int]

_TOKEN_RE = re.compile(
    r"""\s*(?:
        (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
      | (?P<number>-?\d+)
      | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
      | (?P<punct>[|(),;])
    )""",
    re.VERBOSE,
)


def _first_word(s: str) -> str:
    parts = s.split()
    return parts[0] if parts else ""


def _last_word(s: str) -> str:
    parts = s.split()
    return parts[-1] if parts else ""


def _slice(s: str, start: int, end: int | None = None) -> str:
    return s[start:end]


# name -> (function, argument types, required argument count)
OPERATIONS: Dict[str, Tuple[Callable[..., str], Tuple[type, ...], int]] = {
    "trim": (str.strip, (), 0),
    "strip": (str.strip, (), 0),
    "lower": (str.lower, (), 0),
    "upper": (str.upper, (), 0),
    "title": (str.title, (), 0),
    "capitalize": (str.capitalize, (), 0),
    "collapse": (lambda s: " ".join(s.split()), (), 0),
    "ascii": (fold_ascii, (), 0),
    "first_word": (_first_word, (), 0),
    "last_word": (_last_word, (), 0),
    "replace": (lambda s, old, new: s.replace(old, new), (str, str), 2),
    "remove": (lambda s, text: s.replace(text, ""), (str,), 1),
    "slice": (_slice, (int, int), 1),
    "prefix": (lambda s, text: text + s, (str,), 1),
    "suffix": (lambda s, text: s + text, (str,), 1),
    "default": (lambda s, text: s if s.strip() else text, (str,), 1),
}


@dataclass(frozen=True)
class Step:
    op: str
    args: Tuple[Arg, ...] = ()

    def apply(self, value: str) -> str:
        func = OPERATIONS[self.op][0]
        return func(value, *self.args)


@dataclass(frozen=True)
class NameTransform:
    source: str
    steps: Tuple[Step, ...]

    def __call__(self, name: str) -> str:
        value = name
        for step in self.steps:
            value = step.apply(value)
        if not value.strip():
            raise TransformError(f"{ERROR_PREFIX}transform produced an empty name")
        return value


def is_configured(source: str | None) -> bool:
    return bool(source and source.strip())


def _tokenize(source: str) -> List[Tuple[str, str]]:
    tokens: List[Tuple[str, str]] = []
    pos = 0
    text = source.rstrip()
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m or m.end() == pos:
            raise TransformError(f"{ERROR_PREFIX}unexpected input at position {pos}: {text[pos:pos + 10]!r}")
        kind = m.lastgroup or ""
        tokens.append((kind, m.group(kind)))
        pos = m.end()
    return tokens


def _parse_args(tokens: List[Tuple[str, str]], i: int, op: str) -> Tuple[Tuple[Arg, ...], int]:
    # tokens[i] is "("
    args: List[Arg] = []
    i += 1
    expect_value = True
    while i < len(tokens):
        kind, text = tokens[i]
        if kind == "punct" and text == ")":
            if args and expect_value:
                raise TransformError(f"{ERROR_PREFIX}trailing comma in {op}(...)")
            return tuple(args), i + 1
        if expect_value:
            if kind == "string":
                try:
                    args.append(ast.literal_eval(text))
                except (ValueError, SyntaxError) as e:
                    raise TransformError(f"{ERROR_PREFIX}bad string literal {text}") from e
            elif kind == "number":
                args.append(int(text))
            else:
                raise TransformError(f"{ERROR_PREFIX}expected a string or number in {op}(...), got {text!r}")
            expect_value = False
        else:
            if not (kind == "punct" and text == ","):
                raise TransformError(f"{ERROR_PREFIX}expected ',' or ')' in {op}(...), got {text!r}")
            expect_value = True
        i += 1
    raise TransformError(f"{ERROR_PREFIX}missing ')' after {op}(")


def _check_step(op: str, args: Tuple[Arg, ...]) -> Step:
    if op not in OPERATIONS:
        raise TransformError(f"{ERROR_PREFIX}unknown operation {op!r}")
    _, types, required = OPERATIONS[op]
    if not (required <= len(args) <= len(types)):
        if required == len(types):
            expected = str(required)
        else:
            expected = f"{required} to {len(types)}"
        raise TransformError(f"{ERROR_PREFIX}{op} takes {expected} argument(s), got {len(args)}")
    for arg, typ in zip(args, types):
        if not isinstance(arg, typ):
            raise TransformError(f"{ERROR_PREFIX}{op} expects {typ.__name__} arguments, got {arg!r}")
    return Step(op=op, args=args)


@lru_cache(maxsize=64)
def compile_transform(source: str) -> NameTransform:
    tokens = _tokenize(source)
    if tokens and tokens[-1] == ("punct", ";"):
        tokens = tokens[:-1]
    i = 0
    if i < len(tokens) and tokens[i] == ("ident", "return"):
        i += 1
    if i < len(tokens) and tokens[i] == ("ident", "name"):
        i += 1
    elif i < len(tokens) and tokens[i][0] == "ident":
        # a bare pipeline may start with its first operation: "trim | upper"
        tokens = tokens[:i] + [("punct", "|")] + tokens[i:]

    steps: List[Step] = []
    while i < len(tokens):
        kind, text = tokens[i]
        if not (kind == "punct" and text == "|"):
            raise TransformError(f"{ERROR_PREFIX}expected '|' before {text!r}")
        i += 1
        if i >= len(tokens) or tokens[i][0] != "ident":
            raise TransformError(f"{ERROR_PREFIX}expected an operation after '|'")
        op = tokens[i][1]
        i += 1
        args: Tuple[Arg, ...] = ()
        if i < len(tokens) and tokens[i] == ("punct", "("):
            args, i = _parse_args(tokens, i, op)
        steps.append(_check_step(op, args))
    return NameTransform(source=source, steps=tuple(steps))


def transform_name(name: str, source: str) -> str:
    """Apply a pipeline snippet to ``name``; raises TransformError."""
    return compile_transform(source.strip())(name)
