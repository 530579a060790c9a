"""
算式解析與求值

把指令切成 token，再以遞迴下降法建成語法樹。骰子項是樹的葉節點，
括號組是子樹，因此內層一定先於外層求值，擲骰顯示順序也就是樹的
由左至右走訪順序。
"""

import math
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

from models.types import RollResult
from utils.errors import EvaluationError, MalformedTerm, ParseError


NUMBER = "number"
DICE = "dice"
OPERATOR = "op"
LPAREN = "lparen"
RPAREN = "rparen"

_TOKEN_REGEX = re.compile(
    r"(?P<dice>\d*d\d+(?:(?:kh|kl|k)\d+)?)"
    r"|(?P<number>\d*\.\d+|\d+)"
    r"|(?P<op>[+*/-])"
    r"|(?P<lparen>\()"
    r"|(?P<rparen>\))"
    r"|(?P<space>\s+)"
)


@dataclass
class Token:
    kind: str
    text: str
    position: int

    @property
    def end(self) -> int:
        return self.position + len(self.text)


def tokenize(text: str) -> List[Token]:
    """把指令切成 token，空白會被略過但位置會保留"""
    tokens = []
    position = 0
    while position < len(text):
        match = _TOKEN_REGEX.match(text, position)
        if not match:
            raise MalformedTerm(f"Unexpected character {text[position]!r} at position {position}")
        kind = match.lastgroup
        if kind != "space":
            tokens.append(Token(kind, match.group(0), position))
        position = match.end()
    return tokens


class Node:
    """語法樹節點"""

    def evaluate(self) -> float:
        raise NotImplementedError()

    def dice_nodes(self) -> Iterator["DiceNode"]:
        return iter(())


class NumberNode(Node):
    def __init__(self, token: Token):
        self.token = token

    def evaluate(self) -> float:
        return float(self.token.text)


class DiceNode(Node):
    def __init__(self, token: Token):
        self.token = token
        self.result: Optional[RollResult] = None

    def evaluate(self) -> float:
        if self.result is None:
            raise EvaluationError(f"Dice term {self.token.text!r} has not been rolled")
        return float(self.result.kept_total)

    def dice_nodes(self) -> Iterator["DiceNode"]:
        yield self


class UnaryNode(Node):
    def __init__(self, operator: str, operand: Node):
        self.operator = operator
        self.operand = operand

    def evaluate(self) -> float:
        value = self.operand.evaluate()
        return -value if self.operator == "-" else value

    def dice_nodes(self) -> Iterator["DiceNode"]:
        return self.operand.dice_nodes()


class BinaryNode(Node):
    def __init__(self, operator: str, left: Node, right: Node):
        self.operator = operator
        self.left = left
        self.right = right

    def evaluate(self) -> float:
        left = self.left.evaluate()
        right = self.right.evaluate()
        if self.operator == "+":
            return left + right
        if self.operator == "-":
            return left - right
        if self.operator == "*":
            return left * right
        if right == 0:
            raise EvaluationError("Division by zero")
        return left / right

    def dice_nodes(self) -> Iterator["DiceNode"]:
        yield from self.left.dice_nodes()
        yield from self.right.dice_nodes()


class GroupNode(Node):
    """括號組"""

    def __init__(self, inner: Node):
        self.inner = inner

    def evaluate(self) -> float:
        return self.inner.evaluate()

    def dice_nodes(self) -> Iterator["DiceNode"]:
        return self.inner.dice_nodes()


class Parser:
    """遞迴下降解析器

    expr   := term (("+" | "-") term)*
    term   := factor (("*" | "/") factor)*
    factor := ("+" | "-") factor | NUMBER | DICE | "(" expr ")"
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.index = 0

    def peek(self) -> Optional[Token]:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def advance(self) -> Token:
        token = self.peek()
        if token is None:
            raise MalformedTerm("Unexpected end of expression")
        self.index += 1
        return token

    def parse(self) -> Node:
        if not self.tokens:
            raise MalformedTerm("Empty expression")
        node = self.parse_expr()
        leftover = self.peek()
        if leftover is not None:
            raise MalformedTerm(f"Unexpected {leftover.text!r} at position {leftover.position}")
        return node

    def parse_expr(self) -> Node:
        node = self.parse_term()
        while self._at_operator("+-"):
            operator = self.advance().text
            node = BinaryNode(operator, node, self.parse_term())
        return node

    def parse_term(self) -> Node:
        node = self.parse_factor()
        while self._at_operator("*/"):
            operator = self.advance().text
            node = BinaryNode(operator, node, self.parse_factor())
        return node

    def parse_factor(self) -> Node:
        token = self.advance()
        if token.kind == OPERATOR and token.text in "+-":
            return UnaryNode(token.text, self.parse_factor())
        if token.kind == NUMBER:
            return NumberNode(token)
        if token.kind == DICE:
            return DiceNode(token)
        if token.kind == LPAREN:
            inner = self.parse_expr()
            closing = self.peek()
            if closing is None or closing.kind != RPAREN:
                raise MalformedTerm(f"Unclosed parenthesis at position {token.position}")
            self.advance()
            return GroupNode(inner)
        raise MalformedTerm(f"Unexpected {token.text!r} at position {token.position}")

    def _at_operator(self, operators: str) -> bool:
        token = self.peek()
        return token is not None and token.kind == OPERATOR and token.text in operators


def parse(tokens: List[Token]) -> Node:
    """把 token 串解析成語法樹"""
    return Parser(tokens).parse()


def evaluate_node(node: Node) -> float:
    """對語法樹求值，結果必須是有限數"""
    value = node.evaluate()
    if not math.isfinite(value):
        raise EvaluationError("Result is not a finite number")
    return value


def evaluate(text: str) -> float:
    """對只含數字、四則運算與括號的算式求值"""
    try:
        tree = parse(tokenize(text))
    except ParseError as e:
        raise EvaluationError(f"Cannot evaluate {text!r}: {e}")
    if any(True for _ in tree.dice_nodes()):
        raise EvaluationError(f"Cannot evaluate {text!r}: it still contains dice")
    return evaluate_node(tree)


def format_number(value: float) -> str:
    """整數值不顯示小數點"""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
