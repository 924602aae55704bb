"""Errors raised while validating, converting and evaluating expressions."""


class EvaluationError(ValueError):
    """Base class for every error produced by the expression pipeline."""


class UnbalancedParenthesesError(EvaluationError):
    """A closing parenthesis has no opening match, or an opening one is never closed."""

    def __init__(self, expression: str) -> None:
        super().__init__(f"Unbalanced parentheses in expression: {expression!r}")
        self.expression = expression


class EmptyExpressionError(EvaluationError):
    """The expression holds nothing but parentheses and whitespace."""

    def __init__(self, expression: str) -> None:
        super().__init__(f"Empty expression: {expression!r}")
        self.expression = expression


class UnknownSymbolError(EvaluationError):
    """An infix expression contains a character the converter does not know."""

    def __init__(self, symbol: str, position: int) -> None:
        super().__init__(f"Unknown symbol {symbol!r} at position {position}")
        self.symbol = symbol
        self.position = position


class UnknownTokenError(EvaluationError):
    """A postfix token is neither a number nor a supported operator."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Unknown token {token!r}")
        self.token = token


class MalformedPostfixError(EvaluationError):
    """An operator ran out of operands while underflow leniency was disabled."""

    def __init__(self, operator_symbol: str) -> None:
        super().__init__(f"Not enough operands for operator {operator_symbol!r}")
        self.operator_symbol = operator_symbol
