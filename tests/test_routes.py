from __future__ import annotations

import json
from pathlib import Path
from urllib.parse import unquote

import pytest
from fastapi.testclient import TestClient

from presley_site.api.main import create_app
from presley_site.config import Settings

from conftest import SITE_ROOT, future_ms

PROTECTED = [
    "/",
    "/index",
    "/form",
    "/data/songs",
    "/data/books",
    "/other/author",
    "/other/multimedia",
    "/other/creative",
    "/other/design",
]


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


@pytest.mark.parametrize("path", PROTECTED)
def test_protected_pages_redirect_to_login(client, path):
    resp = client.get(path, follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"


@pytest.mark.parametrize("path", PROTECTED)
def test_protected_pages_render_when_logged_in(logged_in, path):
    resp = logged_in.get(path)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert "Pozdrav, ana!" in resp.text


def test_auth_can_be_disabled(settings):
    client = TestClient(create_app(Settings(site_root=settings.site_root, require_auth=False)))
    resp = client.get("/index")
    assert resp.status_code == 200
    assert "Pozdrav, {}!" in resp.text


def test_login_page_is_public(client):
    resp = client.get("/login")
    assert resp.status_code == 200
    assert '<form id="login" action="/login" method="post">' in resp.text


def test_static_mounts(client):
    assert client.get("/css/ttomasic20.css").status_code == 200
    assert client.get("/js/ttomasic20.js").status_code == 200
    assert client.get("/materijali/logo.svg").status_code == 200


def test_login_sets_cookies_and_redirects(client):
    resp = client.post(
        "/login",
        data={"username": "ana", "password": "tajna", "cookie-age": "120"},
        follow_redirects=False,
    )
    assert resp.status_code == 303
    assert resp.headers["location"] == "/index"
    set_cookies = resp.headers.get_list("set-cookie")
    assert any(h.startswith("userCredentials=") and "Max-Age=120" in h for h in set_cookies)
    assert any(h.startswith("customDesign=") and "Max-Age=120" in h for h in set_cookies)

    page = client.get("/index")
    assert page.status_code == 200
    assert "Pozdrav, ana!" in page.text
    assert '<style id="custom-design">' in page.text


def test_login_rejects_spaces_and_out_of_range_age(client):
    resp = client.post("/login", data={"username": "ana maria", "password": "tajna", "cookie-age": "90000"})
    assert resp.status_code == 422
    assert '<label for="username" class="lbl-error">' in resp.text
    assert '<label for="cookie-age" class="lbl-error">' in resp.text
    assert '<label for="password">' in resp.text
    assert "userCredentials" not in resp.headers.get("set-cookie", "")


def test_login_does_not_echo_password(client):
    resp = client.post("/login", data={"username": "", "password": "tajna", "cookie-age": "60"})
    assert resp.status_code == 422
    assert "tajna" not in resp.text


def test_logout_removes_cookies(logged_in):
    resp = logged_in.get("/logout", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"
    removed = [h for h in resp.headers.get_list("set-cookie") if "Max-Age=0" in h]
    assert {h.split("=", 1)[0] for h in removed} == {"userCredentials", "customDesign"}


def test_songs_table(logged_in):
    resp = logged_in.get("/data/songs")
    assert "<caption>Glazbeni proizvodi Elvisa Presleya</caption>" in resp.text
    assert "<th>Naslov</th>" in resp.text
    assert "<td>Heartbreak Hotel</td>" in resp.text
    assert "@table" not in resp.text


def test_multimedia_galleries(logged_in):
    resp = logged_in.get("/other/multimedia")
    assert resp.text.count("<figure") == 2
    assert "<video" in resp.text and "<audio" in resp.text
    for token in ("@img", "@video", "@audio"):
        assert token not in resp.text


def _copy_site(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    for src in SITE_ROOT.rglob("*"):
        if src.is_file():
            dst = root / src.relative_to(SITE_ROOT)
            dst.parent.mkdir(parents=True, exist_ok=True)
            dst.write_bytes(src.read_bytes())
    return root


def test_data_files_are_read_per_request(tmp_path):
    root = _copy_site(tmp_path)
    client = TestClient(create_app(Settings(site_root=root)))
    client.cookies.set("userCredentials", f"ana tajna {future_ms()}")
    (root / "datoteke" / "songs.csv").write_text("Naslov;Godina\nBurning Love;1972\n", encoding="utf-8")
    assert "<td>Burning Love</td>" in client.get("/data/songs").text


def test_malformed_data_file_fails_request(tmp_path):
    root = _copy_site(tmp_path)
    (root / "datoteke" / "multimedia.json").write_text("{not json", encoding="utf-8")
    (root / "datoteke" / "songs.csv").unlink()
    client = TestClient(create_app(Settings(site_root=root)), raise_server_exceptions=False)
    client.cookies.set("userCredentials", f"ana tajna {future_ms()}")

    for path in ("/other/multimedia", "/data/songs"):
        resp = client.get(path)
        assert resp.status_code == 500
        body = resp.json()
        assert body["ok"] is False
        assert body["error"] == "internal_error"
        assert body["requestId"].startswith("err_")


def test_author_page_annotates_image_map(logged_in):
    resp = logged_in.get("/other/author")
    assert resp.text.count("data-description=") == 3
    assert "Pravokutnik:" in resp.text


def test_greeting_with_malformed_auth_cookie_still_renders(client):
    client.cookies.set("userCredentials", "garbage")
    resp = client.get("/index")
    assert resp.status_code == 200
    assert "Pozdrav, {}!" in resp.text


def test_design_page_prefills_current_design(logged_in):
    design = {"primaryColor": "#112233", "secondaryColor": "#445566", "titleSize": 30, "textTransform": "uppercase", "opacity": 70}
    logged_in.cookies.set("customDesign", json.dumps(design))
    resp = logged_in.get("/other/design")
    assert 'id="primary-color" name="primary-color" value="#112233"' in resp.text
    assert 'value="uppercase" checked' in resp.text
    assert ":root{--primary:#112233;--secondary:#445566;}" in resp.text
    assert "header > h1{font-size:30px;}" in resp.text


def _design_form(**overrides):
    data = {
        "primary-color": "#000000",
        "secondary-color": "#ffffff",
        "title-size": "30",
        "text-transformation": "lowercase",
        "opacity": "80",
    }
    data.update(overrides)
    return data


def test_design_submission_sets_cookie(logged_in):
    resp = logged_in.post("/other/design", data=_design_form(), follow_redirects=False)
    assert resp.status_code == 303
    header = next(h for h in resp.headers.get_list("set-cookie") if h.startswith("customDesign="))
    assert "lowercase" in unquote(header)
    assert "expires=" in header.lower()

    page = logged_in.get("/index")
    assert "body{text-transform:lowercase;opacity:80%;}" in page.text


def test_design_submission_rejects_bad_values(logged_in):
    resp = logged_in.post("/other/design", data=_design_form(**{"title-size": "60", "opacity": ""}))
    assert resp.status_code == 422
    assert '<label for="title-size" class="lbl-error">' in resp.text
    assert '<label for="opacity" class="lbl-error">' in resp.text


def test_design_reset_restores_default(logged_in):
    logged_in.cookies.set("customDesign", json.dumps({"primaryColor": "#000000"}))
    resp = logged_in.post("/other/design", data={"reset": "Zadano"}, follow_redirects=False)
    assert resp.status_code == 303
    header = next(h for h in resp.headers.get_list("set-cookie") if h.startswith("customDesign="))
    assert "F5D0C5" in header


def test_statistics_accumulate_across_submissions(logged_in):
    first = logged_in.post("/other/creative", data={"name": "Rock", "value": "10", "frequencies": ""})
    assert first.status_code == 200
    assert "rock [10]" in first.text

    resp = logged_in.post(
        "/other/creative",
        data={"name": "ROCK", "value": "5", "frequencies": json.dumps({"rock": 10, "pop": 2})},
    )
    assert "rock [15]" in resp.text
    assert "pop [2]" in resp.text
    assert "&quot;rock&quot;:15" in resp.text


def test_statistics_rejects_invalid_entry(logged_in):
    resp = logged_in.post("/other/creative", data={"name": " ", "value": "500", "frequencies": ""})
    assert resp.status_code == 422
    assert '<label for="name" class="lbl-error">' in resp.text
    assert '<label for="value" class="lbl-error">' in resp.text
    assert "<svg" not in resp.text


SONGS = "Fever\nDirty, Dirty Feeling\nSuch a Night\nIt Feels So Right\nGirl of My Best Friend\nReconsider Baby\n" * 2


def _music_data(**overrides):
    data = {
        "title": "Elvis Is Back!",
        "website": "https://elvis.com/albums/elvis-is-back",
        "musicType": "album",
        "recordedAt": "1960-03-20T19:00",
        "releaseDateTime": "08.04.1960. 10:00:00",
        "genres": ["rock", "blues"],
        "lang[]": ["en", "hr"],
        "songs": SONGS,
    }
    data.update(overrides)
    return data


def test_music_form_starts_with_hidden_second_fieldset(logged_in):
    resp = logged_in.get("/form")
    assert '<fieldset id="second" style="visibility: hidden">' in resp.text
    assert '<input type="submit" value="Dalje"/>' in resp.text
    assert 'enctype="multipart/form-data"' in resp.text


def test_music_form_two_step_flow(logged_in):
    cover = {"cover": ("cover.png", b"\x89PNG", "image/png")}
    first = logged_in.post("/form", data=_music_data(), files=cover)
    assert first.status_code == 200
    assert '<fieldset id="second" style="visibility: visible">' in first.text
    assert '<input type="submit" value="Pošalji"/>' in first.text
    assert '<input type="hidden" name="cover__filename" value="cover.png"/>' in first.text

    carried = _music_data(secondFieldset="visible", cover__filename="cover.png", price="20")
    rejected = logged_in.post("/form", data={**carried, "rating": "150"}, follow_redirects=False)
    assert rejected.status_code == 422
    assert '<label for="rating" class="lbl-error">' in rejected.text
    assert '<fieldset id="second" style="visibility: visible">' in rejected.text

    done = logged_in.post("/form", data={**carried, "rating": "87"}, follow_redirects=False)
    assert done.status_code == 303
    assert done.headers["location"] == "/index"


def test_music_form_invalid_first_step_lists_query_parameters(logged_in):
    resp = logged_in.post("/form", data=_music_data(website="https://elvis.com/?id=5", title=""))
    assert resp.status_code == 422
    assert '<label for="title" class="lbl-error">' in resp.text
    assert '<label for="website" class="lbl-error">' in resp.text
    assert "GET parameter &#x27;id&#x27; i vrijednost &#x27;5&#x27; nije dozvoljen na ovoj stranici" in resp.text
    assert '<fieldset id="second" style="visibility: hidden">' in resp.text
    assert "@alerts" not in resp.text


def test_music_form_reset(logged_in):
    resp = logged_in.post("/form", data={"reset": "Poništi", "title": "x", "secondFieldset": "visible"})
    assert resp.status_code == 200
    assert '<fieldset id="second" style="visibility: hidden">' in resp.text
    assert 'id="title" name="title" value=""' in resp.text


@pytest.mark.parametrize("value", ["nan", "NaN", "inf"])
def test_non_finite_numbers_are_rejected(logged_in, value):
    stats = logged_in.post("/other/creative", data={"name": "rock", "value": value, "frequencies": ""})
    assert stats.status_code == 422
    assert '<label for="value" class="lbl-error">' in stats.text

    login = logged_in.post("/login", data={"username": "ana", "password": "tajna", "cookie-age": value})
    assert login.status_code == 422
    assert '<label for="cookie-age" class="lbl-error">' in login.text


def test_overflowing_carried_table_is_discarded(logged_in):
    resp = logged_in.post("/other/creative", data={"name": "pop", "value": "3", "frequencies": '{"rock": 1e400}'})
    assert resp.status_code == 200
    assert "pop [3]" in resp.text
    assert "rock" not in resp.text.split('name="frequencies"')[1].split("/>")[0]


@pytest.mark.parametrize("path", ["/index", "/login", "/other/design"])
def test_out_of_range_auth_expiration_skips_greeting(client, path):
    client.cookies.set("userCredentials", "ana tajna 99999999999999999999")
    resp = client.get(path)
    assert resp.status_code == 200


def test_design_saved_with_out_of_range_auth_expiration(client):
    client.cookies.set("userCredentials", "ana tajna 99999999999999999999")
    resp = client.post("/other/design", data=_design_form(), follow_redirects=False)
    assert resp.status_code == 303
    header = next(h for h in resp.headers.get_list("set-cookie") if h.startswith("customDesign="))
    assert "expires=" not in header.lower()


def test_design_submission_rejects_bad_colour(logged_in):
    resp = logged_in.post("/other/design", data=_design_form(**{"primary-color": "red"}))
    assert resp.status_code == 422
    assert '<label for="primary-color" class="lbl-error">' in resp.text
    assert '<label for="secondary-color">' in resp.text
    assert "customDesign" not in resp.headers.get("set-cookie", "")
