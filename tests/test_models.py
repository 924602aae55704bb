"""Test classes PostfixSequence and EvaluationResult."""
from pydantic import ValidationError
import pytest

from postfix_calc.common.errors import EvaluationError, UnknownTokenError
from postfix_calc.common.models import EvaluationResult, PostfixSequence


def test_postfix_sequence_parse() -> None:
    """parse splits postfix text on whitespace."""
    seq = PostfixSequence.parse(" 10 3  * 25 + ")
    assert seq.tokens == ("10", "3", "*", "25", "+")
    assert seq.content == "10 3 * 25 +"
    assert str(seq) == "10 3 * 25 +"
    assert len(seq) == 5


def test_postfix_sequence_empty() -> None:
    """The empty sequence renders as an empty string."""
    seq = PostfixSequence()
    assert seq.tokens == ()
    assert seq.content == ""
    assert len(seq) == 0


def test_postfix_sequence_is_frozen() -> None:
    """A postfix sequence cannot be modified once built."""
    seq = PostfixSequence.parse("1 2 +")
    with pytest.raises(ValidationError):
        seq.tokens = ("3",)


def test_evaluation_result_value() -> None:
    """A successful result exposes its value."""
    res = EvaluationResult(expression="1+2", postfix=PostfixSequence.parse("1 2 +"), value=3.0)
    assert res.ok
    assert res.unwrap() == 3.0


def test_evaluation_result_error() -> None:
    """A failed result re-raises its error on unwrap."""
    error = UnknownTokenError("x")
    res = EvaluationResult(expression="x", error=error)
    assert not res.ok
    with pytest.raises(UnknownTokenError):
        res.unwrap()


def test_evaluation_result_needs_one_outcome() -> None:
    """A result must hold exactly one of value or error."""
    with pytest.raises(ValidationError):
        EvaluationResult(expression="1")
    with pytest.raises(ValidationError):
        EvaluationResult(expression="1", value=1.0, error=EvaluationError("boom"))


def test_evaluation_result_rejects_foreign_error() -> None:
    """Only pipeline errors can be stored in a result."""
    with pytest.raises(ValidationError):
        EvaluationResult(expression="1", error=RuntimeError("boom"))


def test_evaluation_result_invalid_value_type() -> None:
    """A non-numeric value raises a validation error."""
    with pytest.raises(ValidationError):
        EvaluationResult(expression="1", value="not a float")
