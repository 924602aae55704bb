"""
Command-line entrypoint of the postfix calculator.

Modes:
- Expression given as arguments: evaluate it once and exit
- No expression: interactive prompt, ended by "quit" or end of input
- --file: evaluate every line of a text file or archive
"""

import argparse
from pathlib import Path
import sys
from typing import List, Optional, TextIO

from pydantic import BaseModel, Field, FilePath, ValidationError, model_validator

from postfix_calc.batch.batch import BatchEvaluator, build_output_path
from postfix_calc.common.config import CalculatorConfig
from postfix_calc.common.errors import EmptyExpressionError, UnbalancedParenthesesError
from postfix_calc.common.logger import configure_logging, logger
from postfix_calc.common.models import EvaluationResult
from postfix_calc.common.parser import ExpressionParser

EXIT_OK = 0
EXIT_FAILURE = 1

# User-facing messages for the checks run before conversion
ERROR_MESSAGES = {
    UnbalancedParenthesesError: "Your parenthesis look weird...",
    EmptyExpressionError: "Your expression looks weird...",
}


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    expression : list of str
        Expression parts, joined with spaces before evaluation.
    file_path : FilePath, optional
        Text file or archive with one expression per line.
    output_path : Path, optional
        Where batch results are written.
    config : CalculatorConfig
        Shell settings.
    """

    expression: List[str] = Field(default_factory=list)
    file_path: Optional[FilePath] = None
    output_path: Optional[Path] = None
    config: CalculatorConfig = Field(default_factory=CalculatorConfig)

    @model_validator(mode="after")
    def single_input_source(self) -> "CliArgs":
        """Reject an inline expression combined with --file."""
        if self.expression and self.file_path is not None:
            raise ValueError("Give either an expression or --file, not both")
        if self.output_path is not None and self.file_path is None:
            raise ValueError("--output requires --file")
        return self


def flatten(parts: List[str]) -> str:
    """
    Join command-line arguments into one expression.

    :param list parts: Expression parts as split by the shell

    :return: Expression text
    :rtype: str
    """
    return " ".join(parts)


def error_message(result: EvaluationResult) -> str:
    """
    Build the message shown to the user for a failed evaluation.

    :param EvaluationResult result: Failed evaluation

    :return: Human-readable message
    :rtype: str
    """
    return ERROR_MESSAGES.get(type(result.error), str(result.error))


def report(result: EvaluationResult, config: CalculatorConfig, out: TextIO, err: TextIO) -> bool:
    """
    Print a result to out, or its error to err.

    :return: True if the evaluation succeeded
    :rtype: bool
    """
    if not result.ok:
        print(error_message(result), file=err)
        return False
    if config.show_postfix:
        print(result.postfix.content, file=out)
    print(repr(result.value), file=out)
    return True


def run_once(
    expr: str,
    config: CalculatorConfig,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """
    Evaluate a single expression and print the outcome.

    :return: Process exit code
    :rtype: int
    """
    result = ExpressionParser.evaluate(expr, lenient=config.lenient_underflow)
    return EXIT_OK if report(result, config, out or sys.stdout, err or sys.stderr) else EXIT_FAILURE


def run_interactive(
    config: CalculatorConfig,
    stdin: Optional[TextIO] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """
    Read-evaluate loop until the quit command or end of input.

    Failed evaluations are reported and the loop continues.

    :return: Process exit code
    :rtype: int
    """
    stdin = stdin or sys.stdin
    out = out or sys.stdout
    err = err or sys.stderr

    while True:
        out.write(config.prompt)
        out.flush()

        line = stdin.readline()
        if not line:
            # End of input
            out.write("\n")
            break

        if line.strip() == config.quit_command:
            break
        if not line.strip():
            continue

        # Keep leading whitespace so symbol positions match the typed line
        result = ExpressionParser.evaluate(line.rstrip("\r\n"), lenient=config.lenient_underflow)
        report(result, config, out, err)

    return EXIT_OK


def run_batch(cli_args: CliArgs, err: Optional[TextIO] = None) -> int:
    """
    Evaluate every expression of the input file.

    :return: Process exit code, EXIT_FAILURE if any line failed
    :rtype: int
    """
    output_path = cli_args.output_path or build_output_path(cli_args.file_path)
    batch = BatchEvaluator(
        input_file=cli_args.file_path,
        output_file=output_path,
        lenient_underflow=cli_args.config.lenient_underflow,
    )
    try:
        results = batch.run()
    except ValueError as exc:
        print(str(exc), file=err or sys.stderr)
        return EXIT_FAILURE

    return EXIT_OK if all(result.ok for result in results) else EXIT_FAILURE


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param argv: Arguments without the program name, defaults to sys.argv[1:]

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = argparse.ArgumentParser(
        prog="postfix-calc",
        description="Evaluate arithmetic expressions through postfix notation",
    )
    parser.add_argument("expression", nargs="*", help="Expression to evaluate; interactive mode if omitted")
    parser.add_argument("-f", "--file", dest="file_path", help="Text file or archive with one expression per line")
    parser.add_argument("-o", "--output", dest="output_path", help="Where batch results are written")
    parser.add_argument("--show-postfix", action="store_true", help="Print the postfix sequence before the result")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on missing operands instead of substituting identity values",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...)")

    args = parser.parse_args(argv)

    try:
        config = CalculatorConfig(
            show_postfix=args.show_postfix,
            lenient_underflow=False if args.strict else None,
            log_level=args.log_level,
        )
        return CliArgs(
            expression=args.expression,
            file_path=args.file_path,
            output_path=args.output_path,
            config=config,
        )
    except ValidationError as exc:
        parser.error(str(exc))


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function of the postfix-calc command.

    :return: Process exit code
    :rtype: int
    """
    cli_args = parse_args(argv)
    configure_logging(cli_args.config.log_level)

    if cli_args.file_path is not None:
        logger.info(f"📄 Batch mode on {cli_args.file_path}")
        return run_batch(cli_args)

    if cli_args.expression:
        return run_once(flatten(cli_args.expression), cli_args.config)

    return run_interactive(cli_args.config)


if __name__ == "__main__":
    sys.exit(main())
