"""
Tests for snapshot blob decompression.
"""
import json
import pytest
from unittest.mock import patch

from lzstring import LZString

from taby.decompress import MalformedSnapshotError, decompress_payload, parse_gist_files
from taby.models import Card, Space

from conftest import compress


class TestDecompressPayload:
    """Test the per-blob decode step."""

    def test_decodes_record_array(self):
        records = [{"id": 1, "title": "One"}, {"id": 2, "title": "二"}]
        assert decompress_payload("spaces", compress(records)) == records

    def test_empty_array_is_valid(self):
        assert decompress_payload("labels", compress([])) == []

    def test_garbage_raises(self):
        with pytest.raises(MalformedSnapshotError) as exc_info:
            decompress_payload("cards", "definitely not lz-string")
        assert exc_info.value.name == "cards"

    def test_non_json_payload_raises(self):
        payload = LZString().compressToUTF16("{not json")
        with pytest.raises(MalformedSnapshotError, match="invalid JSON"):
            decompress_payload("cards", payload)

    def test_non_array_payload_raises(self):
        payload = LZString().compressToUTF16(json.dumps({"id": 1}))
        with pytest.raises(MalformedSnapshotError, match="expected an array"):
            decompress_payload("spaces", payload)

    def test_record_without_id_raises(self):
        with pytest.raises(MalformedSnapshotError, match="record 1"):
            decompress_payload("spaces", compress([{"id": 1}, {"title": "x"}]))

    def test_decompressor_exception_is_wrapped(self):
        with patch("taby.decompress.LZString") as mock_lz:
            mock_lz.return_value.decompressFromUTF16.side_effect = IndexError("boom")
            with pytest.raises(MalformedSnapshotError, match="decompression failed"):
                decompress_payload("spaces", "x")


class TestParseGistFiles:
    """Test assembling a snapshot from gist files."""

    def test_parses_all_blobs(self, gist_files, sample_snapshot):
        data = parse_gist_files(gist_files)
        assert data == sample_snapshot
        assert isinstance(data.spaces[0], Space)
        assert isinstance(data.cards[0], Card)

    def test_missing_blobs_yield_empty_sequences(self, sample_records):
        files = {"spaces": {"content": compress(sample_records["spaces"])}}
        data = parse_gist_files(files)
        assert len(data.spaces) == 2
        assert data.collections == []
        assert data.labels == []
        assert data.cards == []
        assert data.favicons == []

    def test_accepts_bare_strings(self, sample_records):
        data = parse_gist_files({"labels": compress(sample_records["labels"])})
        assert [l.title for l in data.labels] == ["later", "dev"]

    def test_one_bad_blob_rejects_the_snapshot(self, gist_files):
        gist_files["cards"] = {"content": "corrupted"}
        with pytest.raises(MalformedSnapshotError) as exc_info:
            parse_gist_files(gist_files)
        assert exc_info.value.name == "cards"

    def test_extra_files_are_ignored(self, gist_files):
        gist_files["README.md"] = {"content": "hello"}
        data = parse_gist_files(gist_files)
        assert len(data.spaces) == 2
