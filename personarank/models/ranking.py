"""
Ranking data models

Persona configuration entries, the scored answers returned by the ranking
call and the validated shape of that call's output.
"""

from typing import Iterable, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class PersonaSpec(BaseModel):
    """A persona the generative model is asked to simulate"""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_display_name: str
    model_id: Optional[str] = None


class RankedResponseItem(BaseModel):
    """One persona's simulated answer and its accuracy score"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, protected_namespaces=())

    model_name: str = Field(alias="modelName")
    response_text: str = Field(alias="responseText")
    accuracy: float = Field(ge=0.0, le=1.0)
    reason: Optional[str] = None


RankingKind = Literal["empty", "single", "list"]


class RankingResult(BaseModel):
    """
    Validated output of a ranking call.

    The backend may answer with a list, a single object or nothing usable;
    `kind` records which, and `items` is always a tuple.
    """
    model_config = ConfigDict(frozen=True)

    kind: RankingKind
    items: Tuple[RankedResponseItem, ...] = ()

    @classmethod
    def empty(cls) -> "RankingResult":
        return cls(kind="empty")

    @classmethod
    def single(cls, item: RankedResponseItem) -> "RankingResult":
        return cls(kind="single", items=(item,))

    @classmethod
    def from_items(cls, items: Iterable[RankedResponseItem]) -> "RankingResult":
        items = tuple(items)
        if not items:
            return cls.empty()
        return cls(kind="list", items=items)

    @property
    def is_empty(self) -> bool:
        return not self.items
