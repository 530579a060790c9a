import re
import random
from typing import Dict, List, Optional, Set, Tuple

from models.types import DiceTerm, RollResult, RollStringResult
from utils.errors import InvalidDiceQuantity, MalformedTerm
from utils.expression import (
    DICE, NUMBER, OPERATOR, Token, evaluate, evaluate_node, format_number, parse, tokenize
)


MAX_QUANTITY = 1000


_DICE_TERM_REGEX = re.compile(r"^(\d*)d(\d+)(?:(kh|kl|k)(\d+))?$")

# 指令尾端的旗標，例如 "!1d20 --private" 或 "!1d20 —private"
_FLAGS_REGEX = re.compile(r"( (?:--|—)\w+)+$")
_FLAG_REGEX = re.compile(r" (?:--|—)(\w+)")


def parse_dice_term(token: Token) -> DiceTerm:
    """
    解析單一骰子項，比如 "2d20kh1" 或 "d6"
    """
    match = _DICE_TERM_REGEX.match(token.text)
    if not match:
        raise MalformedTerm(f"Invalid dice term {token.text!r}")

    count_str = match.group(1)
    count = int(count_str) if count_str else 1

    # 在擲骰前拒絕
    if count > MAX_QUANTITY:
        raise InvalidDiceQuantity(f"Max number of dice is {MAX_QUANTITY}")

    sides = int(match.group(2))
    if sides < 1:
        raise MalformedTerm(f"Dice must have at least one side: {token.text!r}")

    keep_str = match.group(3)
    keep_mode = None
    keep_count = None
    if keep_str:
        keep_mode = "kl" if keep_str == "kl" else "kh"
        keep_count = int(match.group(4))

    return DiceTerm(
        count=count,
        sides=sides,
        text=token.text,
        position=token.position,
        keep_mode=keep_mode,
        keep_count=keep_count
    )


def find_suffix(tokens: List[Token], index: int, text: str) -> str:
    """找出直接接在骰子項後面、不含骰子的算式，例如 "1d20+5" 中的 "+5" """
    end = tokens[index].end
    start = end
    i = index + 1
    while i + 1 < len(tokens):
        operator, number = tokens[i], tokens[i + 1]
        if operator.kind != OPERATOR or operator.position != end:
            break
        if number.kind != NUMBER or number.position != operator.end:
            break
        end = number.end
        i += 2
    return text[start:end]


def roll_dice(term: DiceTerm, rng: Optional[random.Random] = None) -> RollResult:
    """擲骰子並返回結果"""
    rng = rng or random.Random()
    rolls = [rng.randint(1, term.sides) for _ in range(term.count)]

    if term.keep_mode:
        drop_count = max(0, term.count - term.keep_count)
        # 保留最高時由小到大捨棄，保留最低時由大到小捨棄
        order = sorted(range(len(rolls)), key=lambda i: rolls[i], reverse=term.keep_mode == "kl")
        for i in order[:drop_count]:
            rolls[i] = -rolls[i]

    result = RollResult(
        original_text=term.text,
        trailing_suffix=term.suffix,
        rolled_values=rolls,
        kept_total=0,
        order_key=term.position
    )
    kept = result.kept_values
    result.kept_total = sum(kept)

    # 大成功/大失敗僅適用於d20，且只看保留下來的骰子
    result.has_critical_success = term.sides == 20 and 20 in kept
    result.has_critical_failure = term.sides == 20 and 1 in kept
    return result


def interpret_rolls(text: str, rng: Optional[random.Random] = None) -> RollStringResult:
    """
    解析並擲出整條指令中的所有骰子，例如 "(2d20kh1+5)*2 + 1d4"
    """
    # 舊版儲存的指令可能帶有 "!"
    original_text = text[1:] if text.startswith("!") else text
    rng = rng or random.Random()

    tokens = tokenize(original_text)
    tree = parse(tokens)
    nodes = list(tree.dice_nodes())

    # 先檢查所有骰子項，避免擲了一半才發現數量超過上限
    token_index: Dict[int, int] = {token.position: i for i, token in enumerate(tokens)}
    terms = []
    for node in nodes:
        term = parse_dice_term(node.token)
        term.suffix = find_suffix(tokens, token_index[node.token.position], original_text)
        terms.append(term)

    for node, term in zip(nodes, terms):
        node.result = roll_dice(term, rng)

    # 把每個骰子項替換成保留的總和
    pieces = []
    last = 0
    for node in nodes:
        pieces.append(original_text[last:node.token.position])
        pieces.append(str(node.result.kept_total))
        last = node.token.end
    pieces.append(original_text[last:])

    rolls = sorted((node.result for node in nodes), key=lambda roll: roll.order_key)

    return RollStringResult(
        original_text=original_text,
        converted_text="".join(pieces),
        rolls=rolls,
        total=evaluate_node(tree)
    )


def escape_asterisks(text: str) -> str:
    """避免 * 被 Discord 當成粗體/斜體"""
    return text.replace("*", r"\*")


def format_roll_line(roll: RollResult) -> str:
    """格式化單一骰子項"""
    values = ", ".join(
        f"~~{-value}~~" if value < 0 else str(value) for value in roll.rolled_values
    )
    subtotal = evaluate(f"{roll.kept_total}{roll.trailing_suffix}")

    line = f"{roll.original_text} ({values})"
    if roll.trailing_suffix:
        line += f" {escape_asterisks(roll.trailing_suffix)}"
    line += f" = {format_number(subtotal)}"

    if roll.has_critical_success:
        line += " - **CRITICAL SUCCESS!**"
    if roll.has_critical_failure:
        line += " - **CRITICAL FAILURE!**"
    return line


def format_rolls_result(result: RollStringResult) -> str:
    """格式化整條指令的擲骰過程"""
    lines = [escape_asterisks(result.original_text)]

    for roll in sorted(result.rolls, key=lambda r: r.order_key):
        lines.append(format_roll_line(roll))

    if len(result.rolls) > 1:
        lines.append(escape_asterisks(result.converted_text))

    lines.append(f"**{format_number(result.total)}**")
    return "\n".join(lines)


def is_roll_string(text: str) -> bool:
    """只含骰子項、數字、空白、運算符與括號，且至少有一個骰子項"""
    try:
        tokens = tokenize(text)
    except MalformedTerm:
        return False
    return any(token.kind == DICE for token in tokens)


def is_dice_command(content: str) -> bool:
    return content.startswith("!") and is_roll_string(content[1:])


def is_math_command(content: str) -> bool:
    """只含數字、空白、運算符與括號的算式"""
    if not content.startswith("!"):
        return False
    try:
        tokens = tokenize(content[1:])
    except MalformedTerm:
        return False
    return bool(tokens) and all(token.kind != DICE for token in tokens)


def split_flags(content: str) -> Tuple[str, Set[str]]:
    """
    拆出指令尾端的旗標，返回 (指令, 旗標集合)
    """
    match = _FLAGS_REGEX.search(content)
    if not match:
        return content, set()
    flags = set(_FLAG_REGEX.findall(match.group(0)))
    return content[:match.start()], flags
