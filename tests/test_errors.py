import pytest

from booksite.blueprints.errors import build_record
from booksite.exceptions import ManifestError
from werkzeug.exceptions import NotFound


def test_unknown_path_json(client):
    response = client.get("/does-not-exist", headers={"Accept": "application/json"})
    assert response.status_code == 404
    payload = response.get_json()
    assert payload["error"]["status"] == 404
    assert payload["error"]["message"] == "Not Found"
    assert payload["error"]["error"]["type"] == "NotFound"


def test_unknown_path_html_uses_404_template(client):
    response = client.get("/does-not-exist", headers={"Accept": "text/html"})
    assert response.status_code == 404
    assert response.mimetype == "text/html"
    assert "Page not found" in response.get_data(as_text=True)


def test_unknown_path_text(client):
    response = client.get("/does-not-exist")
    assert response.status_code == 404
    assert response.mimetype == "text/plain"
    assert response.get_data(as_text=True) == "Not Found"


def test_custom_error_templates_receive_record(make_client, site_tree):
    (site_tree / "views" / "404.html").write_text("{{ root_url }} {{ error.status }} {{ error.message }}", encoding="utf-8")
    client = make_client()
    response = client.get("/nope", headers={"Accept": "text/html"})
    assert response.get_data(as_text=True) == "/ 404 Not Found"


def test_production_hides_error_detail(make_client, site_tree):
    (site_tree / "public" / "book.json").unlink()
    client = make_client(env="production")
    response = client.get("/", headers={"Accept": "application/json"})
    assert response.status_code == 500
    assert response.get_json()["error"]["error"] == {}


def test_development_exposes_error_detail(make_client, site_tree):
    (site_tree / "public" / "book.json").unlink()
    client = make_client(env="development")
    response = client.get("/", headers={"Accept": "application/json"})
    detail = response.get_json()["error"]["error"]
    assert detail["type"] == "ManifestError"
    assert detail["status"] == 500
    assert any("FileNotFoundError" in line for line in detail["traceback"])


def test_unexpected_exception_becomes_500(make_options):
    from booksite import create_app

    app = create_app(make_options(env="production"))

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    response = app.test_client().get("/boom", headers={"Accept": "application/json"})
    assert response.status_code == 500
    assert response.get_json() == {"error": {"status": 500, "message": "kaboom", "error": {}}}


@pytest.mark.parametrize(
    "method, path",
    [("post", "/does-not-exist"), ("post", "/"), ("delete", "/pdf/v1/en"), ("put", "/gitbook/style.css")],
)
def test_other_methods_are_not_found(client, method, path):
    response = getattr(client, method)(path, headers={"Accept": "application/json"})
    assert response.status_code == 404
    assert response.get_json()["error"]["message"] == "Not Found"


def test_other_methods_text_body(client):
    response = client.post("/does-not-exist")
    assert response.status_code == 404
    assert response.get_data(as_text=True) == "Not Found"


@pytest.mark.parametrize(
    "exc, status, message",
    [
        (NotFound(), 404, "Not Found"),
        (ManifestError("book.json not found"), 500, "book.json not found"),
        (ValueError("bad"), 500, "bad"),
    ],
)
def test_build_record(exc, status, message):
    record = build_record(exc, development=False)
    assert record.status == status
    assert record.message == message
    assert record.error == {}


def test_failures_are_logged(make_client, site_tree):
    log_file = site_tree / "site.log"
    client = make_client(logger={"level": "info", "transports": [{"type": "File", "options": {"filename": str(log_file)}}]})
    client.get("/missing/page")
    client.get("/", headers={"Accept": "application/json"})
    content = log_file.read_text(encoding="utf-8")
    assert "HTTP GET /missing/page 404" in content
    assert "[WARNING]" in content
    assert "HTTP GET / 200" in content


def test_failed_request_is_logged_once(make_client, site_tree):
    log_file = site_tree / "site.log"
    client = make_client(logger={"level": "info", "transports": [{"type": "File", "options": {"filename": str(log_file)}}]})
    client.get("/missing")
    lines = [line for line in log_file.read_text(encoding="utf-8").splitlines() if "HTTP GET /missing" in line]
    assert len(lines) == 1
    assert "[WARNING]" in lines[0]
    assert lines[0].endswith("- Not Found")
