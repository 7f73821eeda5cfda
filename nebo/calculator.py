"""Example tool app that performs arithmetic."""

from __future__ import annotations

import json
import math
import sys
from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from .app import App
from .errors import NeboError
from .schema import new_schema
from .tool import ToolHandler


class _Pairs(list):
    """Key/value pairs of a decoded JSON object, in document order."""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid character in value: {name}")


def _format_g(value: float) -> str:
    """Format *value* with the shortest digits, in exponent form outside 1e-4 to 1e6."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    sign = "-" if math.copysign(1.0, value) < 0 else ""
    if value == 0:
        return sign + "0"
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    point = len(digit_tuple) + exponent
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    exp = point - 1
    if exp < -4 or exp >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return f"{sign}{mantissa}e{'-' if exp < 0 else '+'}{abs(exp):02d}"
    if point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return sign + digits + "0" * (point - len(digits))
    return f"{sign}{digits[:point]}.{digits[point:]}"


def _number(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"invalid input: field {key!r} must be a number")
    try:
        number = float(value)
    except OverflowError as exc:
        raise ValueError(f"invalid input: number {value} out of range") from exc
    if math.isinf(number):
        raise ValueError(f"invalid input: number for {key!r} out of range")
    return number


def _parse_input(data: bytes) -> tuple[str, float, float]:
    try:
        decoded = json.loads(data, object_pairs_hook=_Pairs, parse_constant=_reject_constant)
    except (ValueError, TypeError) as exc:
        raise ValueError(f"invalid input: {exc}") from exc
    if decoded is None:
        return "", 0.0, 0.0
    if not isinstance(decoded, _Pairs):
        raise ValueError("invalid input: expected a JSON object")
    action, a, b = "", 0.0, 0.0
    for key, value in decoded:
        field = key.lower()
        if value is None or field not in ("action", "a", "b"):
            continue
        if field == "action":
            if not isinstance(value, str):
                raise ValueError("invalid input: field 'action' must be a string")
            action = value
        elif field == "a":
            a = _number(key, value)
        else:
            b = _number(key, value)
    return action, a, b


class Calculator(ToolHandler):
    """A tool that adds, subtracts, multiplies and divides two numbers."""

    def name(self) -> str:
        return "calculator"

    def description(self) -> str:
        return "Performs arithmetic calculations."

    def schema(self) -> bytes:
        return (
            new_schema("add", "subtract", "multiply", "divide")
            .number("a", "First operand", True)
            .number("b", "Second operand", True)
            .build()
        )

    def execute(self, input: bytes) -> str:
        action, a, b = _parse_input(input)
        if action == "add":
            result = a + b
        elif action == "subtract":
            result = a - b
        elif action == "multiply":
            result = a * b
        elif action == "divide":
            if b == 0:
                raise ZeroDivisionError("division by zero")
            result = a / b
        else:
            raise ValueError(f"unknown action: {action}")
        return f"{_format_g(a)} {action} {_format_g(b)} = {_format_g(result)}"


def main(argv: Sequence[str] | None = None) -> int:
    """Serve the calculator tool until stopped."""
    try:
        app = App()
        app.register_tool(Calculator())
        app.run()
    except NeboError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0