"""Parse and evaluate arithmetic expressions through postfix notation."""
from collections.abc import Callable as ABCCallable
import math
import operator
import string
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from postfix_calc.common.errors import (
    EmptyExpressionError,
    EvaluationError,
    MalformedPostfixError,
    UnbalancedParenthesesError,
    UnknownSymbolError,
    UnknownTokenError,
)
from postfix_calc.common.logger import logger
from postfix_calc.common.models import EvaluationResult, PostfixSequence


# Type alias for operator functions (taking two floats, returning a float)
OperatorFn: ABCCallable[[float, float], float] = Callable[[float, float], float]

DIGITS = frozenset(string.digits)
OPEN_PAREN = "("
CLOSE_PAREN = ")"


def _divide(a: float, b: float) -> float:
    """IEEE-754 division: a zero divisor yields an infinity or nan instead of raising."""
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _remainder(a: float, b: float) -> float:
    """Floating-point remainder whose sign follows the dividend."""
    if b == 0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


# Mapping of operator symbols to (priority, function)
OPERATORS: Dict[str, Tuple[int, OperatorFn]] = {
    "+": (1, operator.add),
    "-": (1, operator.sub),
    "*": (2, operator.mul),
    "/": (2, _divide),
    "%": (2, _remainder),
}

# Operand-underflow policy: when an operator finds too few values on the stack,
# each missing operand is replaced by the identity of its operator family.
# This masks malformed postfix input and is kept for compatibility.
LENIENT_UNDERFLOW: bool = True
UNDERFLOW_IDENTITY: Dict[str, float] = {
    "+": 0.0,
    "-": 0.0,
    "*": 1.0,
    "/": 1.0,
    "%": 1.0,
}


class ExpressionParser:
    """
    Validate, convert and evaluate infix arithmetic expressions.

    Design constraints:
        - No eval(), no dynamic code execution
        - No state kept between calls

    Algorithm:
        1. Check that parentheses are balanced
        2. Convert infix to postfix with the Shunting-yard algorithm
        3. Reduce the postfix sequence with a value stack

    Examples:
        - Infix expression: 1+2*2+3
        - Postfix sequence: 1 2 2 * + 3 +
    """

    @staticmethod
    def is_correctly_wrapped(expr: str) -> bool:
        """
        Check that every ")" closes an earlier "(" and no "(" is left open.

        All other characters are ignored, so an empty expression is balanced.

        :param str expr: Infix expression

        :return: True if the parentheses are balanced
        :rtype: bool
        """
        depth = 0
        for symbol in expr:
            if symbol == OPEN_PAREN:
                depth += 1
            elif symbol == CLOSE_PAREN:
                depth -= 1
                if depth < 0:
                    return False
        return depth == 0

    @staticmethod
    def is_blank(expr: str) -> bool:
        """
        Determine if an expression has no content besides parentheses and whitespace.

        :param str expr: Infix expression

        :return: True if nothing is left to evaluate
        :rtype: bool
        """
        return not expr.replace(OPEN_PAREN, "").replace(CLOSE_PAREN, "").strip()

    @staticmethod
    def _is_number(token: str) -> bool:
        """
        Determine if a token is a non-negative integer literal.

        :param str token: Token string

        :return: True if the token is one or more decimal digits
        :rtype: bool
        """
        return bool(token) and all(symbol in DIGITS for symbol in token)

    @staticmethod
    def to_postfix(expr: str) -> PostfixSequence:
        """
        Convert an infix expression into a postfix sequence.

        Whitespace is skipped, consecutive digits form one literal, and operators
        of equal priority are emitted left to right. Parenthesis balance is not
        re-checked here beyond what the conversion itself needs.

        :param str expr: Infix expression

        :return: Postfix sequence
        :rtype: PostfixSequence
        :raises UnknownSymbolError: If the expression contains an unsupported character
        :raises UnbalancedParenthesesError: If a parenthesis has no match
        """
        output: List[str] = []
        stack: List[str] = []
        number: str = ""

        for position, symbol in enumerate(expr):
            if symbol.isspace():
                continue

            if symbol in DIGITS:
                number += symbol
                continue

            # Any other symbol ends the literal being read
            if number:
                output.append(number)
                number = ""

            if symbol == OPEN_PAREN:
                stack.append(symbol)
            elif symbol == CLOSE_PAREN:
                while stack and stack[-1] != OPEN_PAREN:
                    output.append(stack.pop())
                if not stack:
                    raise UnbalancedParenthesesError(expr)
                # Discard the matching "("
                stack.pop()
            elif symbol in OPERATORS:
                priority = OPERATORS[symbol][0]
                while stack and stack[-1] != OPEN_PAREN and OPERATORS[stack[-1]][0] >= priority:
                    output.append(stack.pop())
                stack.append(symbol)
            else:
                raise UnknownSymbolError(symbol, position)

        if number:
            output.append(number)

        # Append remaining operators, stack top first
        while stack:
            pending = stack.pop()
            if pending == OPEN_PAREN:
                raise UnbalancedParenthesesError(expr)
            output.append(pending)

        postfix = PostfixSequence(tokens=tuple(output))
        logger.debug(f"🔀 {expr!r} -> {postfix.content!r}")
        return postfix

    @staticmethod
    def _pop_operand(stack: List[float], symbol: str, lenient: bool) -> float:
        """
        Pop one operand, substituting the operator's identity on underflow.

        :param list stack: Value stack
        :param str symbol: Operator the operand is popped for
        :param bool lenient: Substitute identities instead of failing

        :return: Operand value
        :rtype: float
        :raises MalformedPostfixError: If the stack is empty and lenient is False
        """
        if stack:
            return stack.pop()
        if not lenient:
            raise MalformedPostfixError(symbol)
        return UNDERFLOW_IDENTITY[symbol]

    @staticmethod
    def evaluate_postfix(tokens: Union[str, Iterable[str]], lenient: Optional[bool] = None) -> float:
        """
        Reduce a postfix sequence to a single value.

        :param tokens: PostfixSequence, space-separated postfix text, or an iterable of tokens
        :param lenient: Substitute identity values for missing operands, defaults to LENIENT_UNDERFLOW

        :return: The value left on the stack, or 0.0 for an empty sequence
        :rtype: float
        :raises UnknownTokenError: If a token is neither a number nor an operator
        :raises MalformedPostfixError: If operands run out and lenient is False
        """
        if lenient is None:
            # Read the module flag at call time so it can be switched at runtime
            lenient = LENIENT_UNDERFLOW
        if isinstance(tokens, str):
            tokens = PostfixSequence.parse(tokens)
        if isinstance(tokens, PostfixSequence):
            tokens = tokens.tokens

        stack: List[float] = []
        for token in tokens:
            if ExpressionParser._is_number(token):
                stack.append(float(token))
            elif token in OPERATORS:
                # Right operand is on top of the stack
                b: float = ExpressionParser._pop_operand(stack, token, lenient)
                a: float = ExpressionParser._pop_operand(stack, token, lenient)
                stack.append(OPERATORS[token][1](a, b))
            else:
                raise UnknownTokenError(token)

        if not stack:
            return 0.0
        return stack.pop()

    @staticmethod
    def evaluate(expr: str, lenient: Optional[bool] = None) -> EvaluationResult:
        """
        Run the whole pipeline on an infix expression.

        Errors never escape: they are returned inside the result.

        :param str expr: Infix expression
        :param lenient: Substitute identity values for missing operands, defaults to LENIENT_UNDERFLOW

        :return: Result holding either the value or the error
        :rtype: EvaluationResult
        """
        postfix = None
        try:
            if not ExpressionParser.is_correctly_wrapped(expr):
                raise UnbalancedParenthesesError(expr)
            if ExpressionParser.is_blank(expr):
                raise EmptyExpressionError(expr)

            postfix = ExpressionParser.to_postfix(expr)
            value = ExpressionParser.evaluate_postfix(postfix, lenient=lenient)
        except EvaluationError as exc:
            logger.info(f"🧮❌ Could not evaluate {expr!r}: {exc}")
            return EvaluationResult(expression=expr, postfix=postfix, error=exc)

        return EvaluationResult(expression=expr, postfix=postfix, value=value)
