"""Print-ready A4 PDF assembly with reportlab.

Images arrive already encoded (JPEG bytes) and already oriented for the
format; this module only places them. Layout coordinates come from
deckpress.pdf.layout in millimetres from the top-left and are converted to
reportlab points measured from the bottom-left here.
"""

from io import BytesIO
from typing import Optional, Sequence

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from deckpress.constants import A4_HEIGHT_MM
from deckpress.core.logging import get_logger
from deckpress.errors import EmptyArtifactError
from deckpress.pdf.layout import CellPlacement, PrintFormat, iter_cells, page_count
from deckpress.pdf.utils import mm_to_points

logger = get_logger(__name__)


def cell_rect_points(cell: CellPlacement) -> tuple[float, float, float, float]:
    """(x, y, width, height) in points with y measured from the page bottom."""
    bottom_mm = A4_HEIGHT_MM - cell.y_mm - cell.height_mm
    return (
        mm_to_points(cell.x_mm),
        mm_to_points(bottom_mm),
        mm_to_points(cell.width_mm),
        mm_to_points(cell.height_mm),
    )


class DocumentBuilder:
    """Lay encoded card images onto A4 pages in grid order."""

    def __init__(self, title: Optional[str] = None):
        self.title = title
        self.failed: list[int] = []

    def build(self, images: Sequence[bytes], fmt: PrintFormat) -> bytes:
        """Render one image per cell and return the PDF bytes.

        An image that reportlab cannot place leaves its cell blank and is
        recorded in ``failed`` by index.

        Raises:
            EmptyArtifactError: If no images are given
        """
        if not images:
            raise EmptyArtifactError("No card images to place in the document")

        self.failed = []
        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        if self.title:
            pdf.setTitle(self.title)

        pages = page_count(len(images), fmt)
        logger.info(
            "Building {}-page {} document ({} images)", pages, fmt.id, len(images)
        )

        current_page = 0
        for cell, data in zip(iter_cells(len(images), fmt), images):
            if cell.page != current_page:
                pdf.showPage()
                current_page = cell.page

            x, y, width, height = cell_rect_points(cell)
            try:
                pdf.drawImage(ImageReader(BytesIO(data)), x, y, width=width, height=height)
            except Exception as error:  # reportlab raises plain Exceptions for bad images
                logger.warning("Could not place image {}: {}", cell.index, error)
                self.failed.append(cell.index)

        pdf.showPage()
        pdf.save()
        return buffer.getvalue()
