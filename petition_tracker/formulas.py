"""Small expression tree for the spreadsheet formulas we write.

Generators build these nodes and only ``Formula.render()`` turns them into
the text sent to the Sheets API, so tests can compare structures instead
of strings.
"""

from __future__ import annotations

from dataclasses import dataclass

from petition_tracker.ranges import quoted

PLACEHOLDER = "-"


@dataclass(frozen=True)
class CellRef:
    sheet: str
    column: str
    row: int

    def render(self) -> str:
        return f"{quoted(self.sheet)}!{self.column}{self.row}"


@dataclass(frozen=True)
class RangeRef:
    sheet: str
    column: str
    start_row: int
    end_row: int

    def render(self) -> str:
        return f"{quoted(self.sheet)}!{self.column}{self.start_row}:{self.column}{self.end_row}"


@dataclass(frozen=True)
class Sum:
    operand: RangeRef

    def render(self) -> str:
        return f"SUM({self.operand.render()})"


@dataclass(frozen=True)
class Difference:
    left: Expression
    right: Expression

    def render(self) -> str:
        return f"{self.left.render()}-{_grouped(self.right)}"


@dataclass(frozen=True)
class Scaled:
    factor: int
    operand: Expression

    def render(self) -> str:
        return f"{self.factor}*{_grouped(self.operand)}"


Expression = CellRef | RangeRef | Sum | Difference | Scaled


def _grouped(expr: Expression) -> str:
    if isinstance(expr, (Difference, Scaled)):
        return f"({expr.render()})"
    return expr.render()


@dataclass(frozen=True)
class Formula:
    expression: Expression

    def render(self) -> str:
        return f"={self.expression.render()}"

    def __str__(self) -> str:
        return self.render()


# A cell is a literal value, the placeholder, or a formula
Cell = int | float | str | Formula


def render_cell(cell: Cell) -> int | float | str:
    if isinstance(cell, Formula):
        return cell.render()
    return cell


def difference(left: Expression, right: Expression) -> Formula:
    return Formula(Difference(left, right))


def trend(current: Expression, recent: Expression, older: Expression) -> Formula:
    """``2*(current-recent)-(current-older)``: the latest window minus the one before it."""
    return Formula(Difference(Scaled(2, Difference(current, recent)), Difference(current, older)))
