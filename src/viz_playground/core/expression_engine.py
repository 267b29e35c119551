import ast
import math
import operator
import re
from typing import Any

from viz_playground.utils.exceptions import ExpressionError


# ---------------------------------------------------------------------------
# OPERATOR REGISTRY
# Only these AST operators are ever evaluated; every other node is rejected.
# ---------------------------------------------------------------------------
_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
    ast.Not: operator.not_,
}

_COMPARE_OPS = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}

# Lower-case literals users type out of habit from spreadsheet/JS formulas.
_NAMED_CONSTANTS = {"true": True, "false": False, "null": None}

MAX_EXPRESSION_LENGTH = 20_000
MAX_EXPONENT = 100
MAX_STRING_LENGTH = 10_000
MAX_RESULT_DIGITS = 300
MAX_INT_BITS = 1000


def normalize_operators(expression: str) -> str:
    """Rewrites the JS-style `&& || ! === !==` spellings into Python operators."""
    text = re.sub(r"(?<![<>=!])===?", "==", expression)
    text = re.sub(r"!==?", "!=", text)
    text = text.replace("&&", " and ").replace("||", " or ")
    text = re.sub(r"!(?!=)", " not ", text)
    return text


def _check_result(value: Any) -> Any:
    """Only bounded real numbers, short strings, bools and None leave the evaluator."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            raise ExpressionError("Integer result is too large.")
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ExpressionError("Result is not a finite number.")
        return value
    if isinstance(value, str):
        if len(value) > MAX_STRING_LENGTH:
            raise ExpressionError("String result is too long.")
        return value
    raise ExpressionError(f"Result of type {type(value).__name__} is not allowed.")


def _check_power(base: Any, exponent: Any) -> None:
    if not isinstance(base, (int, float)) or not isinstance(exponent, (int, float)):
        return
    if abs(exponent) > MAX_EXPONENT:
        raise ExpressionError(f"Exponent larger than {MAX_EXPONENT} is not allowed.")
    # Estimated digit count of the result; checked before the power is computed.
    if abs(base) > 1 and math.log10(abs(base)) * abs(exponent) > MAX_RESULT_DIGITS:
        raise ExpressionError(f"Power result would exceed {MAX_RESULT_DIGITS} digits.")


def _binary(node: ast.BinOp) -> Any:
    op = _BINARY_OPS.get(type(node.op))
    if op is None:
        raise ExpressionError(f"Operator '{type(node.op).__name__}' is not allowed.")

    left = _eval_node(node.left)
    right = _eval_node(node.right)

    if isinstance(node.op, ast.Pow):
        _check_power(left, right)

    # Strings only concatenate with strings; no repetition, no formatting.
    if isinstance(left, str) or isinstance(right, str):
        if not (isinstance(node.op, ast.Add) and isinstance(left, str) and isinstance(right, str)):
            raise ExpressionError("Strings support only '+' with another string.")

    try:
        return _check_result(op(left, right))
    except ZeroDivisionError:
        raise ExpressionError("Division by zero.")
    except (TypeError, ValueError, OverflowError) as e:
        raise ExpressionError(f"Invalid operands: {e}")


def _compare(node: ast.Compare) -> bool:
    left = _eval_node(node.left)
    for op_node, comparator in zip(node.ops, node.comparators):
        op = _COMPARE_OPS.get(type(op_node))
        if op is None:
            raise ExpressionError(f"Comparison '{type(op_node).__name__}' is not allowed.")
        right = _eval_node(comparator)
        try:
            if not op(left, right):
                return False
        except TypeError as e:
            raise ExpressionError(f"Invalid comparison: {e}")
        left = right
    return True


def _eval_node(node: ast.AST) -> Any:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)

    if isinstance(node, ast.Constant):
        if isinstance(node.value, (int, float, str, bool)) or node.value is None:
            return _check_result(node.value)
        raise ExpressionError(f"Literal of type {type(node.value).__name__} is not allowed.")

    if isinstance(node, ast.Name):
        if node.id in _NAMED_CONSTANTS:
            return _NAMED_CONSTANTS[node.id]
        raise ExpressionError(f"Unknown name '{node.id}'.")

    if isinstance(node, ast.UnaryOp):
        op = _UNARY_OPS.get(type(node.op))
        if op is None:
            raise ExpressionError(f"Operator '{type(node.op).__name__}' is not allowed.")
        try:
            return _check_result(op(_eval_node(node.operand)))
        except TypeError as e:
            raise ExpressionError(f"Invalid operand: {e}")

    if isinstance(node, ast.BinOp):
        return _binary(node)

    if isinstance(node, ast.Compare):
        return _compare(node)

    if isinstance(node, ast.BoolOp):
        # Short-circuit like Python: return the deciding operand.
        value = None
        for operand in node.values:
            value = _eval_node(operand)
            if isinstance(node.op, ast.And) and not value:
                return value
            if isinstance(node.op, ast.Or) and value:
                return value
        return value

    if isinstance(node, ast.IfExp):
        return _eval_node(node.body) if _eval_node(node.test) else _eval_node(node.orelse)

    raise ExpressionError(f"Expression element '{type(node).__name__}' is not allowed.")


def evaluate_expression(expression: str) -> Any:
    """
    Evaluates an arithmetic/comparison expression without executing code.

    The text is parsed with `ast` in eval mode and walked against a whitelist:
    literals, arithmetic, comparisons, boolean logic and conditional
    expressions. Names (other than true/false/null), calls, attribute access,
    subscripts, lambdas and comprehensions are rejected.

    Args:
        expression (str): Expression text with column references already substituted.

    Returns:
        Any: The resulting number, string, bool or None.

    Raises:
        ExpressionError: If the expression is malformed, disallowed or fails.
    """
    if not isinstance(expression, str) or not expression.strip():
        raise ExpressionError("Expression is empty.")
    if len(expression) > MAX_EXPRESSION_LENGTH:
        raise ExpressionError(f"Expression exceeds {MAX_EXPRESSION_LENGTH} characters.")

    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except (SyntaxError, ValueError, RecursionError) as e:
        raise ExpressionError(f"Invalid expression syntax: {e}")

    try:
        return _eval_node(tree)
    except RecursionError:
        raise ExpressionError("Expression is nested too deeply.")
