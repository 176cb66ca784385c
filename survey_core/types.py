from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Literal
Stage = Literal["keyword","keyword_start","option","done"]
Pair = tuple[str, str]
Matrix = List[List[float]]
@dataclass
class FieldMapping:
    left: str; right: str; selected: str; time: str
    category: Optional[str] = None
@dataclass
class Decision:
    left: str; right: str; chosen: str
    rt_sec: Optional[float] = None
    category: Optional[str] = None
    def to_record(self, mapping: FieldMapping) -> Dict[str, object]:
        rec: Dict[str, object] = {
            mapping.time: self.rt_sec,
            mapping.left: self.left,
            mapping.right: self.right,
            mapping.selected: self.chosen,
        }
        if mapping.category:
            rec[mapping.category] = self.category
        return rec
@dataclass
class Prompt:
    stage: Stage
    pair: Optional[Pair]
    keyword: Optional[str] = None
    step: int = 0
    total: int = 0
@dataclass
class SurveyResult:
    keywords: List[str]
    options: List[str]
    keyword_matrix: Matrix = field(default_factory=list)
    keyword_weights: List[float] = field(default_factory=list)
    option_matrices: Dict[str, Matrix] = field(default_factory=dict)
    option_weights: Dict[str, List[float]] = field(default_factory=dict)
    scores: List[float] = field(default_factory=list)
    keyword_log: List[Dict[str, object]] = field(default_factory=list)
    option_log: List[Dict[str, object]] = field(default_factory=list)
    valid: bool = True
    diagnostics: List[str] = field(default_factory=list)
    meta: Dict[str, object] = field(default_factory=dict)

    def ranking(self) -> List[tuple[str, float]]:
        """Options paired with their aggregate score, best first."""

        return sorted(zip(self.options, self.scores), key=lambda r: r[1], reverse=True)
