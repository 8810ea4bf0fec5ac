from booksite.exceptions import PdfSearchError


def test_matching_pdf_is_downloaded(client):
    response = client.get("/pdf/v1/en")
    assert response.status_code == 200
    assert response.mimetype == "application/pdf"
    assert response.get_data() == b"%PDF-1.4 english"
    disposition = response.headers["Content-Disposition"]
    assert disposition.startswith("attachment")
    assert "guide-en.pdf" in disposition
    response.close()


def test_language_selects_the_file(client):
    response = client.get("/pdf/v1/it")
    assert response.get_data() == b"%PDF-1.4 italiano"
    response.close()


def test_unknown_release_is_not_found(client):
    response = client.get("/pdf/v9/en", headers={"Accept": "application/json"})
    assert response.status_code == 404
    assert response.get_json()["error"]["message"] == "Not Found"


def test_unknown_language_is_not_found(client):
    assert client.get("/pdf/v1/fr").status_code == 404


def test_first_match_is_deterministic(client, site_tree):
    extra = site_tree / "pdf" / "archive" / "v1"
    extra.mkdir(parents=True)
    (extra / "old-en.pdf").write_bytes(b"%PDF-1.4 archived")
    response = client.get("/pdf/v1/en")
    assert response.get_data() == b"%PDF-1.4 archived"
    response.close()


def test_traversal_attempts_are_not_found(client, site_tree):
    (site_tree / "secret").mkdir()
    (site_tree / "secret" / "x-en.pdf").write_bytes(b"%PDF secret")
    for url in ("/pdf/../en", "/pdf/..%2Fsecret/en", "/pdf/%2E%2E/en", "/pdf/v1/..%2F..%2Fsecret%2Fx-en"):
        response = client.get(url)
        assert response.status_code == 404, url
        assert b"secret" not in response.get_data()


def test_disabled_pdf_path_is_not_found(make_client):
    client = make_client(**{"pdf-path": False})
    assert client.get("/pdf/v1/en").status_code == 404


def test_missing_pdf_directory_is_not_found(make_client, site_tree):
    client = make_client(**{"pdf-path": str(site_tree / "nowhere")})
    assert client.get("/pdf/v1/en").status_code == 404


def _failing_search(*args):
    raise PdfSearchError("PDF search failed: Permission denied")


def test_search_failure_json(make_client, monkeypatch):
    monkeypatch.setattr("booksite.blueprints.site.find_pdf", _failing_search)
    client = make_client(env="production")
    response = client.get("/pdf/v1/en", headers={"Accept": "application/json"})
    assert response.status_code == 500
    assert response.get_json() == {
        "error": {"status": 500, "message": "PDF search failed: Permission denied", "error": {}}
    }


def test_search_failure_text(make_client, monkeypatch):
    monkeypatch.setattr("booksite.blueprints.site.find_pdf", _failing_search)
    client = make_client(env="production")
    response = client.get("/pdf/v1/en")
    assert response.status_code == 500
    assert response.mimetype == "text/plain"
    assert response.get_data(as_text=True) == "PDF search failed: Permission denied"


def test_search_failure_from_walk(make_client, monkeypatch):
    def broken_walk(top, onerror=None, **kwargs):
        onerror(PermissionError(13, "Permission denied", str(top)))
        return iter(())

    monkeypatch.setattr("booksite.services.pdf_lookup.os.walk", broken_walk)
    client = make_client(env="production")
    response = client.get("/pdf/v1/en", headers={"Accept": "application/json"})
    assert response.status_code == 500
    assert response.get_json()["error"]["error"] == {}
