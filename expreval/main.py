# Command-line host for the expression engine.
#
# Two modes:
# - one-shot: `expreval "1+(2*sin(3))"` prints `number: <value>` or the error text and exits non-zero
# - interactive: `expreval --repl` runs a prompt_toolkit session with history, completion and a few
#   colon commands for inspecting and defining variables
#
# Variables may be predefined with -D NAME=EXPRESSION. Bounds come from the environment (and a .env
# file, if present) via expreval.config.load_config.

from __future__ import annotations

import argparse
import logging
import os
from typing import Any, List, Optional, Tuple

from dotenv import load_dotenv
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import FileHistory
from pydantic import ValidationError

from .config import DEFAULT_CONFIG, EvalConfig, load_config
from .errors import EvalError, error_to_string
from .lexer import TokenType, iter_tokens
from .parser import evaluate
from .resolvers import MappingResolver

logger = logging.getLogger(__name__)

HISTORY_FILE = os.path.expanduser("~/.expreval_history")

USAGE = "Usage: expreval <expression>"

_HELP_TOPICS = {
    'general': (
        "Expression evaluator REPL help:\n"
        "Enter an expression to evaluate it. Variables are written with a '$' prefix.\n"
        "Examples:\n"
        "  1+(2*sin(3))\n"
        "  2 < 3 * 1      -> 1.0\n"
        "  --5            -> 5.0\n"
        "  $PI / 2\n"
        "Commands:\n"
        "  :help [topic]          show help (topics: operators, functions)\n"
        "  :vars                  list variables\n"
        "  :set NAME EXPRESSION   define a variable\n"
        "  :history               show recent history\n"
        "  :exit, :quit           exit\n"
    ),
    'operators': (
        "Operators and precedence (high -> low):\n"
        "  prefix: - (any number, pairs cancel)\n"
        "  * / < <= > >= == (same tier, left to right)\n"
        "  + -\n"
        "Notes:\n"
        "  - Comparisons give 1.0 or 0.0, so 1 < 2 < 3 is (1 < 2) < 3.\n"
        "  - A single '=' is the same as '=='.\n"
        "  - Division by zero gives inf or nan.\n"
    ),
}


def show_help(topic: Optional[str], resolver: MappingResolver) -> str:
    """Return help text for topic or general if None."""
    if not topic:
        return _HELP_TOPICS['general']
    key = topic.lower()
    if key == 'functions':
        return (
            "Functions (one argument each):\n  " + ", ".join(resolver.function_names()) +
            "\nVariables:\n  " + ", ".join(f"${name}" for name in resolver.variable_names()) + "\n"
        )
    return _HELP_TOPICS.get(key, f"No help available for topic '{topic}'")


def is_valid_name(name: str, config: EvalConfig = DEFAULT_CONFIG) -> bool:
    """True if name lexes as a single identifier."""
    try:
        tokens = list(iter_tokens(name, config.max_name_length))
    except EvalError:
        return False
    return (
        len(tokens) == 2
        and tokens[0].type == TokenType.FUNCTION
        and tokens[0].name == name
    )


def define_variable(resolver: MappingResolver, definition: str, config: EvalConfig) -> Tuple[str, float]:
    """
    Apply a NAME=EXPRESSION definition to the resolver.

    Raises:
        ValueError: If the definition is malformed
        EvalError: If the expression fails to evaluate
    """
    name, sep, expression = definition.partition('=')
    name = name.strip().lstrip('$')
    if not sep or not expression.strip():
        raise ValueError(f"Expected NAME=EXPRESSION, got {definition!r}")
    if not is_valid_name(name, config):
        raise ValueError(f"Invalid variable name {name!r}")
    value = evaluate(expression, resolver, config=config)
    resolver.set_variable(name, value)
    logger.debug(f"Defined ${name} = {value!r}")
    return name, value


class REPL:
    """Read-Eval-Print Loop over a single resolver."""

    PROMPT = '> '

    def __init__(
        self,
        resolver: Optional[MappingResolver] = None,
        config: EvalConfig = DEFAULT_CONFIG,
        history_file: str = HISTORY_FILE,
        session: Any = None,
    ):
        self.resolver = resolver if resolver is not None else MappingResolver()
        self.config = config
        self.history_file = history_file
        self.session = session

    def _completer(self) -> WordCompleter:
        words = self.resolver.function_names() + [f"${name}" for name in self.resolver.variable_names()]
        return WordCompleter(words, ignore_case=False, WORD=True)

    def _process_command(self, line: str) -> Optional[str]:
        """Handle ':' commands. Returns the response, or None if line is an expression."""
        s = line.strip()
        if not s.startswith(':'):
            return None
        body = s[1:].lstrip()
        if body == '':
            return "No command specified. Use :help for available commands."
        parts = body.split(None, 1)
        cmd = parts[0]
        rest = parts[1] if len(parts) > 1 else ''
        return self._run_command(cmd, rest)

    def _run_command(self, cmd: str, rest: str) -> str:
        """Execute a colon command. Raises EOFError for exit/quit."""
        cmd_lower = cmd.lower()
        if cmd_lower in {'exit', 'quit'}:
            raise EOFError()
        if cmd_lower == 'help':
            return show_help(rest.strip() or None, self.resolver)
        if cmd_lower == 'vars':
            items = sorted(self.resolver.variables.items())
            if not items:
                return "(no variables)"
            return "\n".join(f"${k} = {v!r}" for k, v in items)
        if cmd_lower == 'set':
            parts = rest.split(None, 1)
            if len(parts) != 2:
                return "Usage: :set NAME EXPRESSION"
            try:
                name, value = define_variable(self.resolver, f"{parts[0]}={parts[1]}", self.config)
            except (ValueError, EvalError) as e:
                return f"Error: {e}"
            return f"${name} = {value!r}"
        if cmd_lower == 'history':
            try:
                entries = list(FileHistory(self.history_file).load_history_strings())
            except OSError as e:
                return f"Could not read history: {e}"
            if not entries:
                return "(no history)"
            return "\n".join(reversed(entries[:50]))
        return f"Unknown command: {cmd}"

    def evaluate_line(self, line: str) -> Tuple[bool, str]:
        """Evaluate a command or expression. Returns (ok, output)."""
        cmd_out = self._process_command(line)
        if cmd_out is not None:
            return not cmd_out.startswith("Error:"), cmd_out
        try:
            value = evaluate(line, self.resolver, config=self.config)
        except EvalError as e:
            logger.debug(f"Evaluation of {line!r} failed: {e!r}")
            return False, f"Error: {e}"
        return True, repr(value)

    def repl_loop(self) -> None:
        """Interactive loop; Ctrl-D or :exit ends it."""
        print("Expression evaluator. Type :help for help. Ctrl-D or :exit to quit.")
        if self.session is None:
            self.session = PromptSession(history=FileHistory(self.history_file))
        while True:
            try:
                line = self.session.prompt(self.PROMPT, completer=self._completer())
            except KeyboardInterrupt:
                print("^C")
                continue
            except EOFError:
                print("Exiting.")
                break
            if not line.strip():
                continue
            try:
                ok, out = self.evaluate_line(line)
            except EOFError:
                print("Exiting.")
                break
            print(out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="expreval", description="Evaluate a numeric expression.")
    parser.add_argument(
        "expression",
        nargs="?",
        help="Expression to evaluate, e.g. '1+(2*sin(3))'.",
    )
    parser.add_argument(
        "-D", "--define",
        action="append",
        default=[],
        metavar="NAME=EXPRESSION",
        help="Define a variable usable as $NAME (repeatable).",
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Start an interactive session.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING).",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.repl and args.expression is not None:
        parser.error("an expression cannot be combined with --repl")

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = load_config()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    resolver = MappingResolver()
    for definition in args.define:
        try:
            define_variable(resolver, definition, config)
        except (ValueError, EvalError) as e:
            logger.error(f"Bad definition {definition!r}: {e}")
            return 2

    if args.repl:
        REPL(resolver, config).repl_loop()
        return 0

    if args.expression is None:
        print(USAGE)
        return 0

    try:
        value = evaluate(args.expression, resolver, config=config)
    except EvalError as e:
        print(error_to_string(e.kind))
        return 1

    print(f"number: {value:f}")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
