"""Evaluation of ``depends`` expressions.

Grammar::

    expression := term ((',' | '+') term)*
    term       := NAME | '(' expression ')'

``+`` is AND, ``,`` is OR. Both have the same precedence and associate
left to right, so ``A+B,C`` means ``(A+B),C``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache


class DependsSyntaxError(ValueError):
    """Raised for a malformed dependency expression."""


@dataclass(frozen=True)
class Name:
    """A feature or extension name."""

    name: str


@dataclass(frozen=True)
class BinaryOp:
    """``left op right`` where op is ``+`` (all) or ``,`` (any)."""

    op: str
    left: Node
    right: Node


Node = Name | BinaryOp

_TOKEN = re.compile(r"\s*(?:(?P<name>[A-Za-z_][A-Za-z0-9_:]*)|(?P<op>[+,()]))")


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None:
            raise DependsSyntaxError(f"Unexpected character at {pos} in '{text}'")
        tokens.append(match.group("name") or match.group("op"))
        pos = match.end()
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    def parse(self) -> Node:
        node = self._expression()
        if self.pos != len(self.tokens):
            raise DependsSyntaxError(f"Unexpected '{self.tokens[self.pos]}' in '{self.text}'")
        return node

    def _expression(self) -> Node:
        node = self._term()
        while self.pos < len(self.tokens) and self.tokens[self.pos] in "+,":
            op = self.tokens[self.pos]
            self.pos += 1
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        if self.pos >= len(self.tokens):
            raise DependsSyntaxError(f"Unexpected end of '{self.text}'")
        token = self.tokens[self.pos]
        self.pos += 1
        if token == "(":
            node = self._expression()
            if self.pos >= len(self.tokens) or self.tokens[self.pos] != ")":
                raise DependsSyntaxError(f"Missing ')' in '{self.text}'")
            self.pos += 1
            return node
        if token in "+,)":
            raise DependsSyntaxError(f"Unexpected '{token}' in '{self.text}'")
        return Name(token)


@lru_cache(maxsize=4096)
def parse_depends(text: str) -> Node:
    """Parse a dependency expression into a tree.

    Raises
    ------
        DependsSyntaxError: If the expression is malformed.

    """
    return _Parser(text).parse()


def _evaluate(node: Node, satisfied: Callable[[str], bool]) -> bool:
    if isinstance(node, Name):
        return satisfied(node.name)
    if node.op == "+":
        return _evaluate(node.left, satisfied) and _evaluate(node.right, satisfied)
    return _evaluate(node.left, satisfied) or _evaluate(node.right, satisfied)


def evaluate_depends(text: str | None, satisfied: Callable[[str], bool]) -> bool:
    """Evaluate an expression against a predicate on names.

    An empty or missing expression is always satisfied.

    Examples
    --------
        >>> evaluate_depends("VK_VERSION_1_1,VK_KHR_a+VK_KHR_b", {"VK_VERSION_1_1"}.__contains__)
        True

    """
    if not text or not text.strip():
        return True
    return _evaluate(parse_depends(text), satisfied)


def depends_names(text: str | None) -> list[str]:
    """All names referenced by an expression, in order of appearance."""
    if not text or not text.strip():
        return []
    names: list[str] = []
    stack: list[Node] = [parse_depends(text)]
    while stack:
        node = stack.pop()
        if isinstance(node, Name):
            names.append(node.name)
        else:
            stack.append(node.right)
            stack.append(node.left)
    return names
