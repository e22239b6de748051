"""Grid geometry for print sheets.

All measurements are millimetres with the origin at the top-left corner of
an A4 portrait page. Cards are laid out left-to-right, top-to-bottom,
page-by-page, separated by a fixed gap and centred on the page.
"""

from dataclasses import dataclass
from itertools import cycle, islice
from typing import Iterator, Sequence, TypeVar

from deckpress.constants import A4_HEIGHT_MM, A4_WIDTH_MM, GAP_MM
from deckpress.errors import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class PrintFormat:
    """A fixed card grid and card size for one sheet."""

    id: str
    label: str
    description: str
    cols: int
    rows: int
    card_width_mm: float
    card_height_mm: float
    rotate90: bool = False

    @property
    def cells_per_page(self) -> int:
        return self.cols * self.rows


PRINT_FORMATS: dict[str, PrintFormat] = {
    fmt.id: fmt
    for fmt in (
        PrintFormat(
            id="3x3",
            label="9 cards - 3x3",
            description="Standard size (63x88mm)",
            cols=3,
            rows=3,
            card_width_mm=63.0,
            card_height_mm=88.0,
        ),
        PrintFormat(
            id="4x4",
            label="16 cards - 4x4",
            description="Reduced size (50x69mm)",
            cols=4,
            rows=4,
            card_width_mm=50.0,
            card_height_mm=69.0,
        ),
        PrintFormat(
            id="3x6",
            label="18 cards - 3x6",
            description="Landscape, rotated (66x47mm)",
            cols=3,
            rows=6,
            card_width_mm=66.0,
            card_height_mm=47.0,
            rotate90=True,
        ),
    )
}


@dataclass(frozen=True)
class CellPlacement:
    """Where the index-th image lands: page, grid cell and rectangle in mm."""

    index: int
    page: int
    row: int
    col: int
    x_mm: float
    y_mm: float
    width_mm: float
    height_mm: float


def get_format(format_id: str) -> PrintFormat:
    """Look up a print format by id.

    Raises:
        ValidationError: For an unknown format id
    """
    try:
        return PRINT_FORMATS[format_id]
    except KeyError:
        known = ", ".join(PRINT_FORMATS)
        raise ValidationError(f"Unknown print format '{format_id}' (known: {known})") from None


def compute_margins(fmt: PrintFormat) -> tuple[float, float]:
    """Horizontal and vertical margins that centre the grid on A4.

    Examples:
        >>> compute_margins(PRINT_FORMATS["3x3"])
        (10.2, 16.2)
    """
    grid_width = fmt.cols * fmt.card_width_mm + (fmt.cols - 1) * GAP_MM
    grid_height = fmt.rows * fmt.card_height_mm + (fmt.rows - 1) * GAP_MM
    return (
        round((A4_WIDTH_MM - grid_width) / 2, 6),
        round((A4_HEIGHT_MM - grid_height) / 2, 6),
    )


def cells_per_page(fmt: PrintFormat) -> int:
    return fmt.cells_per_page


def backfill_plan(units: Sequence[T], fmt: PrintFormat, fillers: Sequence[T]) -> list[T]:
    """Pad the last partial page with fillers, cycling through them in order.

    Returns units unchanged when the last page is already full or there are
    no fillers.
    """
    plan = list(units)
    per_page = cells_per_page(fmt)
    remainder = len(plan) % per_page
    if remainder == 0 or not fillers:
        return plan
    plan.extend(islice(cycle(fillers), per_page - remainder))
    return plan


def page_count(count: int, fmt: PrintFormat) -> int:
    per_page = cells_per_page(fmt)
    return (count + per_page - 1) // per_page


def iter_cells(count: int, fmt: PrintFormat) -> Iterator[CellPlacement]:
    """Yield a placement for each of count images."""
    margin_x, margin_y = compute_margins(fmt)
    per_page = cells_per_page(fmt)

    for index in range(count):
        page, slot = divmod(index, per_page)
        row, col = divmod(slot, fmt.cols)
        yield CellPlacement(
            index=index,
            page=page,
            row=row,
            col=col,
            x_mm=margin_x + col * (fmt.card_width_mm + GAP_MM),
            y_mm=margin_y + row * (fmt.card_height_mm + GAP_MM),
            width_mm=fmt.card_width_mm,
            height_mm=fmt.card_height_mm,
        )
