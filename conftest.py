"""Shared fixtures: a throw-away book tree and application factories."""
from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from booksite import create_app  # noqa: E402
from booksite.config import load_options  # noqa: E402

MANIFEST = {
    "title": "Handbook",
    "pluginsConfig": {"versions": {"options": ["1.0", "2.0"]}},
}


@pytest.fixture()
def site_tree(tmp_path):
    public = tmp_path / "public"
    public.mkdir()
    (public / "book.json").write_text(json.dumps(MANIFEST), encoding="utf-8")
    (public / "gitbook").mkdir()
    (public / "gitbook" / "style.css").write_text("body { margin: 0; }", encoding="utf-8")
    (public / "guide").mkdir()
    (public / "guide" / "index.html").write_text("<h1>Guide</h1>", encoding="utf-8")

    pdf = tmp_path / "pdf"
    (pdf / "releases" / "v1").mkdir(parents=True)
    (pdf / "releases" / "v1" / "guide-en.pdf").write_bytes(b"%PDF-1.4 english")
    (pdf / "releases" / "v1" / "guide-it.pdf").write_bytes(b"%PDF-1.4 italiano")

    (tmp_path / "views").mkdir()
    locales = tmp_path / "locales"
    locales.mkdir()
    (locales / "en.json").write_text(json.dumps({"Versions": "Versions"}), encoding="utf-8")
    (locales / "it.json").write_text(json.dumps({"Versions": "Versioni", "Page not found": "Pagina non trovata"}), encoding="utf-8")
    return tmp_path


@pytest.fixture()
def make_options(site_tree):
    def _make(**overrides):
        return load_options(overrides, environ={}, base_dir=site_tree)

    return _make


@pytest.fixture()
def make_client(make_options):
    def _make(**overrides):
        app = create_app(make_options(**overrides))
        app.config.update({"TESTING": True})
        return app.test_client()

    return _make


@pytest.fixture()
def client(make_client):
    return make_client()
