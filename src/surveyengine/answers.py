"""
Answer Variants

A respondent's answer to one question is either a single value
(text, textarea, dropdown, rating, multiple-choice) or an ordered set of
values (checkbox).

Raw answers coming from a form or from persisted JSON are converted to a
variant exactly once, at the boundary. Everything downstream (tallying,
validation, export) dispatches on the variant, never on the raw type.

ARCHITECTURAL RULE:
    Answers are immutable.
    They carry values only, not the question they belong to.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Tuple, Union

Scalar = Union[str, int, float]


class Answer(ABC):
    """
    Base class for answer variants.

    Subclasses expose ``values`` (what tallying counts) and ``to_raw``
    (what gets persisted).
    """

    @property
    @abstractmethod
    def values(self) -> Tuple[Scalar, ...]:
        ...

    @abstractmethod
    def to_raw(self) -> Any:
        ...

    @abstractmethod
    def is_empty(self) -> bool:
        ...


@dataclass(frozen=True)
class SingleAnswer(Answer):
    """
    One value for one question.

    Example:
        A rating of 4 becomes SingleAnswer(4).
    """

    value: Scalar

    @property
    def values(self) -> Tuple[Scalar, ...]:
        return (self.value,)

    def to_raw(self) -> Scalar:
        return self.value

    def is_empty(self) -> bool:
        if self.value is None:
            return True
        if isinstance(self.value, str):
            return not self.value.strip()
        return False


@dataclass(frozen=True)
class MultiAnswer(Answer):
    """
    Ordered set of values for one question (checkbox).

    Duplicates are dropped on construction, first occurrence wins, so a
    record never counts twice toward the same bucket.
    """

    choices: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "choices", tuple(dict.fromkeys(self.choices)))

    @property
    def values(self) -> Tuple[str, ...]:
        return self.choices

    def to_raw(self) -> list:
        return list(self.choices)

    def is_empty(self) -> bool:
        return len(self.choices) == 0


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float))


def is_raw_answer(raw: Any) -> bool:
    """True for a scalar or a flat list of scalars, the shapes to_answer accepts."""
    if isinstance(raw, Answer):
        return True
    if isinstance(raw, (list, tuple)):
        return all(_is_scalar(v) for v in raw)
    return _is_scalar(raw)


def to_answer(raw: Any) -> Answer:
    """
    Convert a raw value into an Answer variant.

    Lists and tuples become MultiAnswer, everything else SingleAnswer.
    Values that already are Answers pass through unchanged.
    """
    if isinstance(raw, Answer):
        return raw
    if isinstance(raw, (list, tuple)):
        return MultiAnswer(tuple(raw))
    return SingleAnswer(raw)
