class DiceError(ValueError):
    """擲骰指令錯誤的基底類別"""


class ValidationError(DiceError):
    """指令內容超出允許範圍（在擲骰前拒絕）"""


class InvalidDiceQuantity(ValidationError):
    """骰子數量超過上限"""


class ParseError(DiceError):
    """指令通過語法檢查後仍無法解析"""


class MalformedTerm(ParseError):
    """骰子項或括號組結構錯誤"""


class EvaluationError(DiceError):
    """算式無法求值"""
