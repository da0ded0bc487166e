import os

from jinja2 import TemplateError

from conftest import parse_entries
from updown.routers import listing


def test_root_listing_shape(client, serve_dir):
    r = client.get("/")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    entries = parse_entries(r.text)
    assert entries[0] == ("../", "<DIR>", "/", "..")
    assert sorted(entries[1:]) == [
        ("docs/", "<DIR>", "/", "docs"),
        ("hello.txt", "", "/download", "hello.txt"),
    ]
    assert f"Path: {serve_dir.resolve()}" in r.text


def test_listing_follows_filesystem_order(client, serve_dir):
    names = [e[0] for e in parse_entries(client.get("/").text)[1:]]
    expected = []
    for entry in os.scandir(serve_dir):
        expected.append(entry.name + "/" if entry.is_dir() else entry.name)
    assert names == expected


def test_empty_p_means_root(client):
    assert parse_entries(client.get("/?p=").text) == parse_entries(client.get("/").text)


def test_nested_listing_links(client, serve_dir):
    r = client.get("/", params={"p": "docs"})
    assert r.status_code == 200
    assert parse_entries(r.text) == [
        ("../", "<DIR>", "/", "."),
        ("readme.txt", "", "/download", "docs/readme.txt"),
    ]
    assert f"Path: {(serve_dir / 'docs').resolve()}" in r.text


def test_empty_directory_lists_only_parent(client, serve_dir):
    (serve_dir / "empty").mkdir()
    entries = parse_entries(client.get("/?p=empty").text)
    assert entries == [("../", "<DIR>", "/", ".")]


def test_entry_names_are_escaped(client, serve_dir):
    (serve_dir / "<b>bold.txt").write_text("x", encoding="utf-8")
    r = client.get("/")
    assert "<b>bold.txt" not in r.text
    assert ("<b>bold.txt", "", "/download", "<b>bold.txt") in parse_entries(r.text)


def test_upload_form_is_rendered(client):
    r = client.get("/")
    assert 'action="/upload"' in r.text
    assert 'name="file"' in r.text


def test_missing_directory_is_500(client):
    r = client.get("/?p=nope")
    assert r.status_code == 500
    assert r.content == b""


def test_file_as_directory_is_500(client):
    r = client.get("/?p=hello.txt")
    assert r.status_code == 500
    assert r.content == b""


def test_parent_of_root_is_forbidden(client):
    r = client.get("/?p=..")
    assert r.status_code == 403
    assert r.content == b""


def test_dotdot_segments_cannot_escape(client):
    assert client.get("/", params={"p": "docs/../../"}).status_code == 403
    assert client.get("/", params={"p": "docs/.."}).status_code == 200


def test_symlink_out_of_root_is_forbidden(client, serve_dir, output_dir):
    os.symlink(output_dir, serve_dir / "elsewhere")
    assert client.get("/?p=elsewhere").status_code == 403


def test_render_failure_is_500(client, monkeypatch):
    def broken(*args, **kwargs):
        raise TemplateError("boom")

    monkeypatch.setattr(listing.templates, "TemplateResponse", broken)
    r = client.get("/")
    assert r.status_code == 500
    assert r.content == b""


def test_nul_in_path_is_400(client):
    r = client.get("/", params={"p": "a\x00b"})
    assert r.status_code == 400
    assert r.content == b""
