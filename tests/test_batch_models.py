"""Tests for batch document models, loaders and the JSON store."""

from pathlib import Path
import json
import tempfile

import httpx
import pytest
from pydantic import ValidationError

from hocrbatch.batch import (
    Batch,
    JsonBatchStore,
    Page,
    fetch_json,
    is_url,
    load_batch,
    load_json,
    parse_batch,
)


FIXTURES_DIR = Path(__file__).parent / "fixtures"


class TestBatch:
    """Tests for Batch/Document/Page models."""

    def test_parse_simple_batch(self):
        """Test parsing a batch document with aliased fields."""
        batch = load_batch(FIXTURES_DIR / "batch_simple.json")

        assert batch.batch_instance_identifier == "BI1"
        assert len(batch.documents) == 2
        assert batch.documents[0].identifier == "DOC1"
        assert batch.documents[0].pages[0].new_file_name == "BI1_0.tif"
        assert batch.documents[0].pages[0].ocr_input_file_name == "BI1_0_color.tif"

    def test_pages_in_document_then_page_order(self):
        """Test batch.pages() walks documents, then pages."""
        batch = load_batch(FIXTURES_DIR / "batch_simple.json")

        ids = [page.identifier for page in batch.pages()]
        assert ids == ["PG0", "PG1", "PG2"]

    def test_hocr_file_name_initially_empty(self):
        """Test pages start without an hOCR file name."""
        batch = load_batch(FIXTURES_DIR / "batch_simple.json")
        assert all(page.hocr_file_name is None for page in batch.pages())

    def test_unknown_keys_are_kept(self):
        """Test extra keys owned by other plugins survive parsing."""
        batch = load_batch(FIXTURES_DIR / "batch_simple.json")
        dumped = batch.model_dump(by_alias=True)

        assert dumped["batchName"] == "Sample Batch"
        assert dumped["documents"][0]["type"] == "Invoice"

    def test_populate_by_field_name(self):
        """Test models accept python field names as well as aliases."""
        page = Page(new_file_name="a.tif", ocr_input_file_name="a_c.tif")
        assert page.new_file_name == "a.tif"

    def test_missing_identifier_raises(self):
        """Test that a batch without an instance identifier is rejected."""
        with pytest.raises(ValidationError):
            parse_batch({"documents": []})


class TestImageFileName:
    """Tests for Page.image_file_name()."""

    def test_color_off_uses_new_file_name(self):
        page = Page(new_file_name="a.tif", ocr_input_file_name="a_color.tif")
        assert page.image_file_name(False) == "a.tif"

    def test_color_on_uses_ocr_input_file_name(self):
        page = Page(new_file_name="a.tif", ocr_input_file_name="a_color.tif")
        assert page.image_file_name(True) == "a_color.tif"


class TestJsonBatchStore:
    """Tests for JsonBatchStore."""

    def test_save_then_load(self):
        """Test a saved batch can be loaded back with its hOCR names."""
        with tempfile.TemporaryDirectory() as tmpdir:
            store = JsonBatchStore(Path(tmpdir))
            batch = load_batch(FIXTURES_DIR / "batch_simple.json")
            batch.documents[0].pages[0].hocr_file_name = "BI1_0.hocr"

            store.save(batch)
            loaded = store.load("BI1")

            assert loaded.documents[0].pages[0].hocr_file_name == "BI1_0.hocr"
            assert loaded.documents[0].pages[1].hocr_file_name is None

    def test_save_writes_aliases(self):
        """Test the stored document uses the batch vocabulary."""
        with tempfile.TemporaryDirectory() as tmpdir:
            store = JsonBatchStore(Path(tmpdir))
            store.save(Batch(batch_instance_identifier="BI5"))

            data = json.loads(store.batch_path("BI5").read_text(encoding="utf-8"))
            assert data["batchInstanceIdentifier"] == "BI5"

    def test_save_leaves_no_temp_files(self):
        """Test the atomic write cleans up after itself."""
        with tempfile.TemporaryDirectory() as tmpdir:
            store = JsonBatchStore(Path(tmpdir))
            store.save(Batch(batch_instance_identifier="BI5"))

            names = [p.name for p in (Path(tmpdir) / "BI5").iterdir()]
            assert names == ["batch.json"]

    def test_load_missing_batch_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = JsonBatchStore(Path(tmpdir))
            with pytest.raises(FileNotFoundError):
                store.load("nope")


class TestLoadJson:
    """Tests for load_json()."""

    def test_load_json_from_path(self):
        data = load_json(str(FIXTURES_DIR / "batch_simple.json"))
        assert data["batchInstanceIdentifier"] == "BI1"

    def test_load_json_from_url(self):
        """Test URLs are fetched through the given httpx client."""
        body = json.loads((FIXTURES_DIR / "batch_simple.json").read_text())
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json=body)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            batch = load_batch("https://example.org/batch/BI1.json", client=client)

        assert seen == ["https://example.org/batch/BI1.json"]
        assert batch.batch_instance_identifier == "BI1"

    def test_http_error_status_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))

        with httpx.Client(transport=transport) as client:
            with pytest.raises(httpx.HTTPStatusError):
                fetch_json("https://example.org/missing.json", client=client)

    def test_non_object_document_rejected(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "list.json"
            path.write_text("[1, 2]")

            with pytest.raises(ValueError, match="JSON object"):
                load_json(path)

    def test_is_url(self):
        assert is_url("https://example.org/b.json")
        assert is_url("HTTP://example.org/b.json")
        assert not is_url("/data/local/BI1/batch.json")
        assert not is_url(Path("/data/local/BI1/batch.json"))
