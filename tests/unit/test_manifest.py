import json

import pytest

from booksite.exceptions import ManifestError, UpstreamFailure
from booksite.services.manifest import read_manifest, summarize, summary_payload


def test_read_and_summarize(tmp_path):
    manifest = {"pluginsConfig": {"versions": {"options": ["1.0", "2.0"]}}}
    (tmp_path / "book.json").write_text(json.dumps(manifest), encoding="utf-8")
    loaded = read_manifest(tmp_path)
    assert loaded == manifest
    assert summary_payload(loaded) == {"bookJson": ["1.0", "2.0"]}


def test_missing_file(tmp_path):
    with pytest.raises(ManifestError) as excinfo:
        read_manifest(tmp_path)
    assert isinstance(excinfo.value, UpstreamFailure)
    assert excinfo.value.status_code == 500


def test_directory_instead_of_file(tmp_path):
    (tmp_path / "book.json").mkdir()
    with pytest.raises(ManifestError):
        read_manifest(tmp_path)


def test_summary_path_error_names_missing_key():
    with pytest.raises(ManifestError, match="pluginsConfig.versions"):
        summarize({"pluginsConfig": {}})


def test_summary_of_non_object():
    with pytest.raises(ManifestError):
        summarize(["1.0"])
