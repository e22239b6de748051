"""Integration tests for the export pipeline.

Runs the full deck -> archive / PDF path with real Pillow and reportlab,
serving images from memory instead of the network.
"""

import zipfile
from io import BytesIO

import pypdfium2 as pdfium
import pytest

from conftest import FakeFetcher, make_dual, make_printing
from deckpress.cancellation import CancelToken
from deckpress.deck.models import Deck, DeckLineItem, TokenRef
from deckpress.errors import EmptyArtifactError, OperationCancelledError, ValidationError
from deckpress.imaging.acquisition import ImageAcquirer
from deckpress.services.export import DeckExporter


def _exporter(fetcher, settings):
    return DeckExporter(ImageAcquirer(fetcher=fetcher), settings)


def _zip_names(data: bytes) -> list:
    with zipfile.ZipFile(BytesIO(data)) as archive:
        return archive.namelist()


def _pdf_pages(data: bytes) -> int:
    document = pdfium.PdfDocument(data)
    try:
        return len(document)
    finally:
        document.close()


class TestArchiveExport:
    """Deck -> ZIP of card images."""

    def test_dual_faced_copies_get_front_and_back(self, fetcher, isolated_settings):
        """Three copies of a dual-faced card give six paired entries."""
        deck = Deck("Delver Deck", (DeckLineItem(make_dual("Delver of Secrets"), 3),))

        artifact = _exporter(fetcher, isolated_settings).export_archive(deck)

        names = _zip_names(artifact.data)
        assert artifact.file_name == "delver_deck_deck.zip"
        assert len(names) == 6
        fronts = [n for n in names if not n.endswith("_back.jpg")]
        for front in fronts:
            assert front.replace(".jpg", "_back.jpg") in names

    def test_each_face_fetched_once_per_unit(self, fetcher, isolated_settings):
        deck = Deck("Delver Deck", (DeckLineItem(make_dual("Delver of Secrets"), 3),))

        _exporter(fetcher, isolated_settings).export_archive(deck)

        assert len(fetcher.calls) == 2

    def test_sample_deck_entries(self, fetcher, sample_deck, isolated_settings):
        artifact = _exporter(fetcher, isolated_settings).export_archive(sample_deck)

        assert sorted(_zip_names(artifact.data)) == sorted(
            [
                "lightning_bolt_version_1_copy_1.jpg",
                "lightning_bolt_version_1_copy_2.jpg",
                "lightning_bolt_version_1_copy_3.jpg",
                "lightning_bolt_version_2.jpg",
                "delver_of_secrets_copy_1.jpg",
                "delver_of_secrets_copy_1_back.jpg",
                "delver_of_secrets_copy_2.jpg",
                "delver_of_secrets_copy_2_back.jpg",
                "_token_goblin.jpg",
            ]
        )
        assert artifact.skipped == []

    def test_progress_counts_entries_and_ends_full(self, fetcher, sample_deck, isolated_settings):
        seen = []
        _exporter(fetcher, isolated_settings).export_archive(sample_deck, on_progress=seen.append)

        assert [s.current for s in seen] == list(range(1, 10))
        assert seen[-1].total == 9
        assert seen[-1].label == "Token: Goblin"
        assert any(s.label == "Delver of Secrets (back)" for s in seen)

    def test_failed_unit_is_skipped(self, sample_deck, isolated_settings):
        fetcher = FakeFetcher(failing=("https://img.test/lightning-bolt-m10.jpg",))
        seen = []

        artifact = _exporter(fetcher, isolated_settings).export_archive(
            sample_deck, on_progress=seen.append
        )

        assert "lightning_bolt_version_2.jpg" not in _zip_names(artifact.data)
        assert artifact.skipped == ["Card: Lightning Bolt"]
        assert seen[-1].current == seen[-1].total

    def test_all_failed_raises(self, isolated_settings):
        deck = Deck("Ghosts", (DeckLineItem(make_printing("Ghost"), 2),))
        fetcher = FakeFetcher(failing=("https://img.test/ghost-tst.jpg",))

        with pytest.raises(EmptyArtifactError) as excinfo:
            _exporter(fetcher, isolated_settings).export_archive(deck)

        assert excinfo.value.errors == ["Card: Ghost"]

    def test_placeholder_counts_as_failure(self, fetcher, isolated_settings):
        blank = make_printing("Blank", image_uri=None, face_images=(None,))
        deck = Deck("Mixed", (DeckLineItem(blank, 1), DeckLineItem(make_printing("Bolt"), 1)))

        artifact = _exporter(fetcher, isolated_settings).export_archive(deck)

        assert _zip_names(artifact.data) == ["bolt.jpg"]
        assert artifact.skipped == ["Card: Blank"]

    def test_save_writes_to_output_dir(self, fetcher, sample_deck, isolated_settings):
        artifact = _exporter(fetcher, isolated_settings).export_archive(sample_deck)

        path = artifact.save()

        assert path.parent == isolated_settings.output_dir
        assert path.read_bytes() == artifact.data


class TestDocumentExport:
    """Deck -> paginated A4 PDF."""

    def test_backfill_fills_last_page(self, fetcher, sample_deck, isolated_settings):
        """Seven cards plus tokens fit one 3x3 page."""
        artifact = _exporter(fetcher, isolated_settings).export_document(sample_deck, "3x3")

        assert artifact.file_name == "mono_red_test_deck_3x3_a4.pdf"
        assert artifact.data.startswith(b"%PDF")
        assert _pdf_pages(artifact.data) == 1

    def test_page_count_follows_format(self, fetcher, isolated_settings):
        deck = Deck("Big", (DeckLineItem(make_printing("Mountain"), 20),))

        artifact = _exporter(fetcher, isolated_settings).export_document(deck, "4x4")

        assert _pdf_pages(artifact.data) == 2

    def test_rotated_format(self, fetcher, sample_deck, isolated_settings):
        artifact = _exporter(fetcher, isolated_settings).export_document(sample_deck, "3x6")
        assert _pdf_pages(artifact.data) == 1

    def test_progress_counts_units(self, fetcher, sample_deck, isolated_settings):
        seen = []
        _exporter(fetcher, isolated_settings).export_document(
            sample_deck, on_progress=seen.append
        )

        assert [(s.current, s.total) for s in seen] == [(1, 4), (2, 4), (3, 4), (4, 4)]
        assert [s.label for s in seen] == [
            "Lightning Bolt",
            "Lightning Bolt",
            "Delver of Secrets",
            "Token: Goblin",
        ]

    def test_dual_faced_composited_once(self, fetcher, isolated_settings):
        deck = Deck("Delver Deck", (DeckLineItem(make_dual("Delver of Secrets"), 4),))

        _exporter(fetcher, isolated_settings).export_document(deck)

        assert sorted(fetcher.calls) == [
            "https://img.test/delver-of-secrets-back.jpg",
            "https://img.test/delver-of-secrets-front.jpg",
        ]

    def test_token_failure_recorded(self, sample_deck, isolated_settings):
        fetcher = FakeFetcher(failing=("https://img.test/goblin-token.jpg",))

        artifact = _exporter(fetcher, isolated_settings).export_document(sample_deck)

        assert artifact.skipped == ["Token: Goblin"]

    def test_all_failed_raises(self, isolated_settings):
        goblin = TokenRef(make_printing("Goblin", printing_id="goblin-token"))
        deck = Deck("Ghosts", (DeckLineItem(make_printing("Ghost"), 1, tokens=(goblin,)),))
        fetcher = FakeFetcher(
            failing=("https://img.test/ghost-tst.jpg", "https://img.test/goblin-token.jpg")
        )

        with pytest.raises(EmptyArtifactError) as excinfo:
            _exporter(fetcher, isolated_settings).export_document(deck)

        assert excinfo.value.errors == ["Card: Ghost", "Token: Goblin"]

    def test_unknown_format(self, fetcher, sample_deck, isolated_settings):
        with pytest.raises(ValidationError):
            _exporter(fetcher, isolated_settings).export_document(sample_deck, "9x9")

    def test_cancel_before_start(self, fetcher, sample_deck, isolated_settings):
        token = CancelToken()
        token.cancel()

        with pytest.raises(OperationCancelledError):
            _exporter(fetcher, isolated_settings).export_document(sample_deck, cancel=token)
        assert fetcher.calls == []

    def test_cancel_mid_run(self, fetcher, sample_deck, isolated_settings):
        token = CancelToken()

        def stop_after_first(snapshot):
            token.cancel("closed")

        with pytest.raises(OperationCancelledError):
            _exporter(fetcher, isolated_settings).export_archive(
                sample_deck, on_progress=stop_after_first, cancel=token
            )
        assert len(fetcher.calls) == 1
