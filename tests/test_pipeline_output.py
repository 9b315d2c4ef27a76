"""Tests for hOCR output naming and merge-back."""

from pathlib import Path

from hocrbatch.batch import load_batch
from hocrbatch.pipeline.output import (
    hocr_extension,
    hocr_output_path,
    merge_results,
    update_batch,
)
from hocrbatch.pipeline.worker import TaskResult


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _hocr_names(batch):
    return [page.hocr_file_name for page in batch.pages()]


class TestHocrOutputPath:
    """Tests for hocr_output_path() and hocr_extension()."""

    def test_uses_base_name_and_hocr_suffix(self):
        path = hocr_output_path("BI1_0.tif", Path("/data/local/BI1"), "3.02")
        assert path == Path("/data/local/BI1/BI1_0.hocr")

    def test_same_page_produces_same_path(self):
        """Test deterministic output paths."""
        workdir = Path("/data/local/BI1")
        assert hocr_output_path("a.tif", workdir) == hocr_output_path("a.tif", workdir)

    def test_legacy_versions_write_html(self):
        assert hocr_extension("3.01") == ".html"
        assert hocr_extension("2.04") == ".html"

    def test_current_versions_write_hocr(self):
        assert hocr_extension("3.02") == ".hocr"
        assert hocr_extension("4.1.1") == ".hocr"
        assert hocr_extension("v5.3.0") == ".hocr"

    def test_unparseable_version_defaults_to_hocr(self):
        assert hocr_extension("tesseract_base") == ".hocr"
        assert hocr_extension(None) == ".hocr"


class TestUpdateBatch:
    """Tests for update_batch()."""

    def test_sets_matching_page(self):
        batch = load_batch(FIXTURES_DIR / "batch_simple.json")

        updated = update_batch(batch, "BI1_1.tif", "BI1_1.hocr", color_mode=False)

        assert updated == 1
        assert _hocr_names(batch) == [None, "BI1_1.hocr", None]

    def test_match_is_case_insensitive(self):
        batch = load_batch(FIXTURES_DIR / "batch_simple.json")

        update_batch(batch, "bi1_2.tif", "BI1_2.hocr", color_mode=False)

        assert _hocr_names(batch) == [None, None, "BI1_2.hocr"]

    def test_matches_by_mode(self):
        """Test color mode matches on the OCR input file name."""
        batch = load_batch(FIXTURES_DIR / "batch_simple.json")

        assert update_batch(batch, "BI1_0.tif", "x.hocr", color_mode=True) == 0
        assert update_batch(batch, "BI1_0_color.tif", "BI1_0_color.hocr", color_mode=True) == 1
        assert _hocr_names(batch) == ["BI1_0_color.hocr", None, None]

    def test_no_match_is_silent(self):
        batch = load_batch(FIXTURES_DIR / "batch_simple.json")

        assert update_batch(batch, "unknown.tif", "unknown.hocr", color_mode=False) == 0
        assert _hocr_names(batch) == [None, None, None]


class TestMergeResults:
    """Tests for merge_results()."""

    def test_merges_every_result(self):
        batch = load_batch(FIXTURES_DIR / "batch_simple.json")
        results = [
            TaskResult("BI1_2.TIF", "BI1_2.hocr"),
            TaskResult("BI1_0.tif", "BI1_0.hocr"),
        ]

        assert merge_results(batch, results, color_mode=False) == 2
        assert _hocr_names(batch) == ["BI1_0.hocr", None, "BI1_2.hocr"]

    def test_merge_is_idempotent(self):
        """Test merging the same results twice gives the same tree."""
        results = [TaskResult("BI1_0.tif", "BI1_0.hocr"), TaskResult("BI1_1.tif", "BI1_1.hocr")]

        once = load_batch(FIXTURES_DIR / "batch_simple.json")
        merge_results(once, results, color_mode=False)

        twice = load_batch(FIXTURES_DIR / "batch_simple.json")
        merge_results(twice, results, color_mode=False)
        merge_results(twice, results, color_mode=False)

        assert once.model_dump() == twice.model_dump()
