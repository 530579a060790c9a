from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class DiceTerm:
    """骰子項配置，例如 2d20kh1"""
    count: int
    sides: int
    text: str
    position: int  # 在原始指令中的位置
    keep_mode: Optional[str] = None  # "kh" 或 "kl"
    keep_count: Optional[int] = None
    suffix: str = ""  # 直接接在骰子項後面的算式，例如 "+2"


@dataclass
class RollResult:
    """單一骰子項的結果"""
    original_text: str
    trailing_suffix: str
    rolled_values: List[int]  # 負值代表被捨棄的骰子
    kept_total: int
    has_critical_success: bool = False
    has_critical_failure: bool = False
    order_key: int = 0

    @property
    def kept_values(self) -> List[int]:
        return [value for value in self.rolled_values if value >= 0]

    @property
    def discarded_values(self) -> List[int]:
        return [-value for value in self.rolled_values if value < 0]


@dataclass
class RollStringResult:
    """整條擲骰指令的結果"""
    original_text: str
    converted_text: str
    rolls: List[RollResult] = field(default_factory=list)
    total: float = 0.0
