"""Pydantic models passed between the conversion and evaluation stages."""
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from postfix_calc.common.errors import EvaluationError


class PostfixSequence(BaseModel):
    """
    Ordered postfix (reverse Polish) tokens, operands before their operators.

    The canonical textual form joins tokens with a single space,
    e.g. ``"1 2 2 * + 3 +"``.
    """

    model_config = ConfigDict(frozen=True)

    tokens: Tuple[str, ...] = Field(default=(), description="Postfix tokens in evaluation order")

    @classmethod
    def parse(cls, text: str) -> "PostfixSequence":
        """
        Build a sequence from whitespace-separated postfix text.

        :param str text: Postfix text such as "1 2 +"

        :return: Parsed postfix sequence
        :rtype: PostfixSequence
        """
        return cls(tokens=tuple(text.split()))

    @property
    def content(self) -> str:
        """Textual postfix form."""
        return " ".join(self.tokens)

    def __str__(self) -> str:
        return self.content

    def __len__(self) -> int:
        return len(self.tokens)


class EvaluationResult(BaseModel):
    """
    Outcome of evaluating one expression: either a value or an error, never both.
    """

    # Allow storing the exception instance itself
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    expression: str = Field(..., description="Original infix expression")
    postfix: Optional[PostfixSequence] = Field(default=None, description="Converted postfix sequence, if conversion succeeded")
    value: Optional[float] = Field(default=None, description="Numeric result on success")
    error: Optional[EvaluationError] = Field(default=None, description="Error that aborted the evaluation")

    @model_validator(mode="after")
    def exactly_one_outcome(self) -> "EvaluationResult":
        """Ensure the result carries a value or an error, but not both."""
        if (self.value is None) == (self.error is None):
            raise ValueError("EvaluationResult needs exactly one of value or error")
        return self

    @property
    def ok(self) -> bool:
        """True when the expression evaluated successfully."""
        return self.error is None

    def unwrap(self) -> float:
        """
        Return the value, or raise the stored error.

        :return: Evaluated value
        :rtype: float
        :raises EvaluationError: If the evaluation failed
        """
        if self.error is not None:
            raise self.error
        return self.value
