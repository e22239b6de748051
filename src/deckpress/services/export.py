"""Deck export service.

Turns a deck snapshot into one of two artifacts:
- a ZIP with one JPEG per physical copy and face
- an A4 PDF with the cards laid out on a print grid

A unit whose artwork cannot be acquired is logged, recorded in
``ExportArtifact.skipped`` and left out; the run only fails when nothing at
all could be acquired.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from deckpress.cancellation import CancelToken, check
from deckpress.config import settings as settings_module
from deckpress.config.settings import DeckPressSettings
from deckpress.core.logging import get_logger, log_operation
from deckpress.deck.aggregator import ArtifactUnit, artifact_units, expand
from deckpress.deck.models import Deck
from deckpress.errors import EmptyArtifactError, FetchError
from deckpress.export.archive import ArchiveBuilder, file_name
from deckpress.imaging.acquisition import ImageAcquirer
from deckpress.pdf.document import DocumentBuilder
from deckpress.pdf.layout import PrintFormat, backfill_plan, get_format
from deckpress.pdf.utils import to_snake_case
from deckpress.progress import ProgressCallback, progress

logger = get_logger(__name__)


@dataclass
class ExportArtifact:
    """Finished export: suggested file name, bytes, and what was left out."""

    file_name: str
    data: bytes
    skipped: List[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.data)

    def save(self, directory: Union[str, Path, None] = None) -> Path:
        """Write the artifact into directory (settings.output_dir by default)."""
        target_dir = Path(directory) if directory is not None else settings_module.settings.output_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / self.file_name
        path.write_bytes(self.data)
        logger.info("Wrote {} ({} bytes)", path, self.size)
        return path


def _skip_label(unit: ArtifactUnit, back: bool = False) -> str:
    if unit.is_token:
        return f"Token: {unit.name}"
    return f"Card: {unit.name} (back)" if back else f"Card: {unit.name}"


def archive_file_name(deck: Deck) -> str:
    return f"{to_snake_case(deck.name)}_deck.zip"


def document_file_name(deck: Deck, fmt: PrintFormat) -> str:
    return f"{to_snake_case(deck.name)}_deck_{fmt.id}_a4.pdf"


class DeckExporter:
    """Export pipeline over an ImageAcquirer.

    Args:
        acquirer: Image loader/compositor (a default ImageAcquirer if None)
        settings: Settings instance (the global settings if None)
    """

    def __init__(
        self,
        acquirer: Optional[ImageAcquirer] = None,
        settings: Optional[DeckPressSettings] = None,
    ):
        self.acquirer = acquirer or ImageAcquirer()
        self.settings = settings or settings_module.settings

    def _face_bytes(self, reference: str, cancel: Optional[CancelToken]) -> bytes:
        image = self.acquirer.acquire(reference, cancel=cancel)
        return self.acquirer.encode(image, self.settings.archive_image_quality)

    def export_archive(
        self,
        deck: Deck,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelToken] = None,
    ) -> ExportArtifact:
        """Build the image archive for a deck.

        Progress counts archive entries (copies x faces).

        Raises:
            EmptyArtifactError: If no image at all could be acquired
            OperationCancelledError: If cancel fires mid-run
        """
        units = artifact_units(deck)
        total = sum(unit.quantity * (2 if unit.is_dual_faced else 1) for unit in units)
        builder = ArchiveBuilder()
        skipped: List[str] = []

        with log_operation("Export archive", deck=deck.name, entries=total) as summary:
            with progress("Archive entries", total, on_progress) as tracker:
                for unit in units:
                    check(cancel)
                    copies = expand(unit)
                    faces = [(unit.front_image, False, unit.label)]
                    if unit.back_image is not None:
                        faces.append((unit.back_image, True, f"{unit.name} (back)"))

                    for reference, is_back, label in faces:
                        try:
                            data = self._face_bytes(reference, cancel)
                        except FetchError as error:
                            logger.warning("Skipping {}: {}", label, error)
                            skipped.append(_skip_label(unit, back=is_back))
                            tracker.update(len(copies), label)
                            continue

                        for copy in copies:
                            builder.add(
                                file_name(
                                    unit.name,
                                    is_token=unit.is_token,
                                    version_ordinal=unit.version_ordinal,
                                    is_back_face=is_back,
                                    copy_ordinal=copy.copy_ordinal,
                                ),
                                data,
                            )
                            tracker.update(1, label)

                if len(builder) == 0:
                    raise EmptyArtifactError(
                        f"No images could be loaded. Errors: {', '.join(skipped)}", skipped
                    )
                tracker.finish()
            summary["written"] = len(builder)
            summary["skipped"] = len(skipped)

        if skipped:
            logger.warning("Some images could not be loaded: {}", ", ".join(skipped))
        return ExportArtifact(archive_file_name(deck), builder.build(), skipped)

    def _unit_image(
        self, unit: ArtifactUnit, fmt: PrintFormat, cancel: Optional[CancelToken]
    ) -> bytes:
        if unit.back_image is not None:
            image = self.acquirer.composite_dual_face(
                unit.front_image, unit.back_image, rotate=fmt.rotate90, cancel=cancel
            )
        else:
            image = self.acquirer.acquire(unit.front_image, rotate=fmt.rotate90, cancel=cancel)
        return self.acquirer.encode(image, self.settings.document_image_quality)

    def export_document(
        self,
        deck: Deck,
        format_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelToken] = None,
    ) -> ExportArtifact:
        """Build the print-ready PDF for a deck.

        Each unit is acquired once and repeated for its quantity; a partial
        last page is filled with token images. Progress counts units.

        Raises:
            ValidationError: For an unknown format id
            EmptyArtifactError: If no image at all could be acquired
            OperationCancelledError: If cancel fires mid-run
        """
        fmt = get_format(format_id or self.settings.default_print_format)
        units = artifact_units(deck)
        images: List[bytes] = []
        token_images: List[bytes] = []
        skipped: List[str] = []

        with log_operation("Export document", deck=deck.name, format=fmt.id) as summary:
            with progress("Document units", len(units), on_progress) as tracker:
                for unit in units:
                    check(cancel)
                    try:
                        data = self._unit_image(unit, fmt, cancel)
                    except FetchError as error:
                        logger.warning("Skipping {}: {}", unit.label, error)
                        skipped.append(_skip_label(unit))
                    else:
                        images.extend([data] * unit.quantity)
                        if unit.is_token:
                            token_images.append(data)
                    tracker.update(1, unit.label)

            if not images:
                raise EmptyArtifactError(
                    f"No images could be loaded. Errors: {', '.join(skipped)}", skipped
                )

            check(cancel)
            plan = backfill_plan(images, fmt, token_images)
            pdf_bytes = DocumentBuilder(title=deck.name).build(plan, fmt)
            summary["cells"] = len(plan)
            summary["skipped"] = len(skipped)

        if skipped:
            logger.warning("Some images could not be loaded: {}", ", ".join(skipped))
        return ExportArtifact(document_file_name(deck, fmt), pdf_bytes, skipped)
