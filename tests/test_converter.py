# tests/test_converter.py
"""
Tests for identifier encoding conversions.
"""
import pytest

from docresolver.config import settings
from docresolver.file_access.converter import (
    child_encoded_id,
    document_to_tree,
    external_storage_identifier,
    filesystem_path_of,
    identifier_for_path,
    legacy_downloads_to_external_storage,
    parent_encoded_id,
    path_segments,
    raw_identifier,
    raw_path_of,
    tree_to_document,
)
from docresolver.file_access.errors import ConversionUnsupported
from docresolver.file_access.identifiers import DocumentIdentifier

DOWNLOADS = "com.android.providers.downloads.documents"
EXTERNAL = "com.android.externalstorage.documents"


class TestTreeDocumentConversion:

    def test_tree_to_document(self):
        tree = external_storage_identifier("Download", tree=True)
        document = tree_to_document(tree)
        assert document.is_tree_form is False
        assert document.encoded_id == "primary:Download"
        assert document.authority == EXTERNAL

    def test_tree_to_document_requires_tree(self):
        assert tree_to_document(external_storage_identifier("Download")) is None

    def test_document_to_tree(self):
        tree = document_to_tree(DocumentIdentifier("com.example.cloud", "folder-17"))
        assert tree.is_tree_form is True
        assert tree.encoded_id == "folder-17"

    def test_document_to_tree_keeps_tree(self):
        tree = external_storage_identifier("Download", tree=True)
        assert document_to_tree(tree) is tree

    def test_document_to_tree_empty_id(self):
        assert document_to_tree(DocumentIdentifier(EXTERNAL, "")) is None


class TestLegacyDownloadsConversion:

    def test_raw_path_under_shared_root(self):
        converted = legacy_downloads_to_external_storage(
            DocumentIdentifier(DOWNLOADS, "raw:/storage/emulated/0/Download/report.json")
        )
        assert converted == DocumentIdentifier(EXTERNAL, "primary:Download/report.json")
        assert converted.authority == EXTERNAL

    def test_nested_folder(self):
        converted = legacy_downloads_to_external_storage(
            raw_identifier("/storage/emulated/0/Download/UPdate/file.json")
        )
        assert converted.encoded_id == "primary:Download/UPdate/file.json"

    def test_shared_root_itself(self):
        converted = legacy_downloads_to_external_storage(raw_identifier("/storage/emulated/0"))
        assert converted.encoded_id == "primary:"

    def test_download_segment_elsewhere(self):
        converted = legacy_downloads_to_external_storage(raw_identifier("/mnt/sdcard/Download/a.json"))
        assert converted.encoded_id == "primary:Download/a.json"

    def test_plural_segment_normalized(self):
        converted = legacy_downloads_to_external_storage(raw_identifier("/sdcard/Downloads/x/a.json"))
        assert converted.encoded_id == "primary:Download/x/a.json"

    def test_no_anchor_fails(self):
        with pytest.raises(ConversionUnsupported):
            legacy_downloads_to_external_storage(raw_identifier("/data/local/tmp/a.json"))

    def test_similar_prefix_is_not_shared_root(self):
        with pytest.raises(ConversionUnsupported):
            legacy_downloads_to_external_storage(raw_identifier("/storage/emulated/01/a.json"))

    @pytest.mark.parametrize("marker", ["downloads", "msf:downloads"])
    def test_downloads_root_marker(self, marker):
        converted = legacy_downloads_to_external_storage(DocumentIdentifier(DOWNLOADS, marker))
        assert converted == external_storage_identifier("Download")

    @pytest.mark.parametrize("encoded_id", ["msf:1234", "42", "raw:relative/path"])
    def test_unknown_sub_format(self, encoded_id):
        with pytest.raises(ConversionUnsupported):
            legacy_downloads_to_external_storage(DocumentIdentifier(DOWNLOADS, encoded_id))

    def test_tree_flag_preserved(self):
        converted = legacy_downloads_to_external_storage(
            raw_identifier("/storage/emulated/0/Download/sub", tree=True)
        )
        assert converted.is_tree_form is True

    def test_idempotent(self):
        once = legacy_downloads_to_external_storage(
            raw_identifier("/storage/emulated/0/Download/report.json")
        )
        twice = legacy_downloads_to_external_storage(once)
        assert twice is once

    def test_other_provider_unchanged(self):
        identifier = DocumentIdentifier("com.example.cloud", "raw:/storage/emulated/0/x")
        assert legacy_downloads_to_external_storage(identifier) is identifier

    def test_respects_configured_shared_root(self, monkeypatch):
        monkeypatch.setattr(settings, "SHARED_STORAGE_ROOT", "/sdcard")
        converted = legacy_downloads_to_external_storage(raw_identifier("/sdcard/Music/a.mp3"))
        assert converted.encoded_id == "primary:Music/a.mp3"


class TestPathHelpers:

    def test_raw_path_of(self):
        assert raw_path_of(raw_identifier("/storage/emulated/0/a")) == "/storage/emulated/0/a"
        assert raw_path_of(DocumentIdentifier(DOWNLOADS, "msf:12")) is None
        assert raw_path_of(DocumentIdentifier(EXTERNAL, "raw:/x")) is None

    def test_path_segments(self):
        assert path_segments(external_storage_identifier("Download/sub")) == ("primary:", ("Download", "sub"))
        assert path_segments(raw_identifier("/storage/x")) == ("raw:", ("storage", "x"))
        assert path_segments(DocumentIdentifier("com.example.cloud", "a/b")) is None
        assert path_segments(DocumentIdentifier(EXTERNAL, "no-volume")) is None

    def test_child_encoded_id(self):
        assert child_encoded_id(external_storage_identifier(""), "Download") == "primary:Download"
        assert child_encoded_id(raw_identifier("/storage"), "x") == "raw:/storage/x"

    def test_parent_encoded_id(self):
        assert parent_encoded_id(external_storage_identifier("Download/UPdate/a.json")) == "primary:Download/UPdate"
        assert parent_encoded_id(external_storage_identifier("a.json")) == "primary:"
        assert parent_encoded_id(external_storage_identifier("")) is None
        assert parent_encoded_id(raw_identifier("/storage/emulated/0/Download/a.json")) == (
            "raw:/storage/emulated/0/Download"
        )
        assert parent_encoded_id(DocumentIdentifier("com.example.cloud", "a/b")) is None

    def test_filesystem_path_of(self):
        assert filesystem_path_of(external_storage_identifier("Download/a.json")) == (
            "/storage/emulated/0/Download/a.json"
        )
        assert filesystem_path_of(external_storage_identifier("")) == "/storage/emulated/0"
        assert filesystem_path_of(DocumentIdentifier(EXTERNAL, "1A2B-3C4D:DCIM/x.jpg")) == (
            "/storage/1A2B-3C4D/DCIM/x.jpg"
        )
        assert filesystem_path_of(DocumentIdentifier(DOWNLOADS, "msf:downloads")) == (
            "/storage/emulated/0/Download"
        )
        assert filesystem_path_of(DocumentIdentifier(DOWNLOADS, "msf:99")) is None
        assert filesystem_path_of(DocumentIdentifier("com.example.cloud", "x")) is None

    def test_identifier_for_path(self):
        assert identifier_for_path(EXTERNAL, "/storage/emulated/0/Download/a.json") == (
            external_storage_identifier("Download/a.json")
        )
        assert identifier_for_path(EXTERNAL, "/storage/1A2B-3C4D/DCIM/x.jpg") == (
            DocumentIdentifier(EXTERNAL, "1A2B-3C4D:DCIM/x.jpg")
        )
        assert identifier_for_path(DOWNLOADS, "/any/path") == raw_identifier("/any/path")
        assert identifier_for_path(EXTERNAL, "/data/x") is None
        assert identifier_for_path("com.example.cloud", "/storage/emulated/0/x") is None
