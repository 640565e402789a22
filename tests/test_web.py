import json

import pytest
from fastapi.testclient import TestClient

from papershelf.config import Settings
from papershelf.gui.app import create_app


@pytest.fixture()
def settings(tmp_path):
    return Settings.load(tmp_path)


@pytest.fixture()
def client(settings):
    return TestClient(create_app(settings))


@pytest.fixture()
def service(client):
    return client.app.state.papershelf.service


def _add(client, **data):
    data.setdefault("title", "Attention Is All You Need")
    return client.post("/add", data=data, follow_redirects=False)


def test_add_with_link_and_tags(client, service):
    response = _add(client, link="https://arxiv.org/abs/1706.03762", tags=["ml"], new_tags="ml, nlp")
    assert response.status_code == 303
    [paper] = service.list_papers()
    assert paper.tag_list == ["ml", "nlp"]


def test_add_multiple_selected_tags(client, service):
    _add(client, link="https://x", tags=["a", "b"])
    assert service.list_papers()[0].tag_list == ["a", "b"]


def test_add_without_link_or_pdf_is_rejected(client, service):
    response = _add(client, new_tags="ml")
    assert response.status_code == 400
    assert "Provide a link or a PDF file" in response.text
    assert service.list_papers() == []


def test_add_with_pdf_upload(client, service, settings):
    response = client.post(
        "/add",
        data={"title": "ResNet"},
        files={"pdf": ("resnet.pdf", b"%PDF-1.4 test", "application/pdf")},
        follow_redirects=False,
    )
    assert response.status_code == 303
    [paper] = service.list_papers()
    assert paper.pdf_path.endswith("resnet.pdf")
    assert (settings.upload_dir / paper.pdf_path).read_bytes() == b"%PDF-1.4 test"

    served = client.get(f"/uploads/{paper.pdf_path}")
    assert served.status_code == 200


def test_non_pdf_upload_rejected(client, service):
    response = client.post(
        "/add",
        data={"title": "Notes"},
        files={"pdf": ("notes.txt", b"hello", "text/plain")},
        follow_redirects=False,
    )
    assert response.status_code == 400
    assert service.list_papers() == []


def test_rejected_add_does_not_keep_upload(client, service, settings):
    response = client.post(
        "/add",
        data={"title": ""},
        files={"pdf": ("a.pdf", b"%PDF-1.4", "application/pdf")},
        follow_redirects=False,
    )
    assert response.status_code == 400
    assert service.list_papers() == []
    assert list(settings.upload_dir.iterdir()) == []


def test_rejected_edit_discards_new_upload_only(client, service, settings):
    client.post(
        "/add",
        data={"title": "P"},
        files={"pdf": ("p.pdf", b"%PDF", "application/pdf")},
    )
    paper = service.list_papers()[0]
    response = client.post(
        f"/edit/{paper.id}",
        data={"title": "", "pdf_path": paper.pdf_path},
        files={"pdf": ("q.pdf", b"%PDF-new", "application/pdf")},
        follow_redirects=False,
    )
    assert response.status_code == 400
    assert [p.name for p in settings.upload_dir.iterdir()] == [paper.pdf_path]
    assert service.get(paper.id).pdf_path == paper.pdf_path


def test_index_and_tag_pages(client):
    _add(client, title="Older", link="https://1", new_tags="vision")
    _add(client, title="Newer", link="https://2", new_tags="vision, nlp")

    index = client.get("/")
    assert index.status_code == 200
    assert "vision" in index.text and "nlp" in index.text

    page = client.get("/tag/vision")
    assert page.status_code == 200
    assert page.text.index("Newer") < page.text.index("Older")


def test_detail_and_missing_paper(client, service):
    _add(client, link="https://x", new_tags="a")
    paper_id = service.list_papers()[0].id
    assert client.get(f"/paper/{paper_id}").status_code == 200
    assert client.get("/paper/999").status_code == 404


def test_edit_flow(client, service):
    _add(client, title="Draft", link="https://x", new_tags="a")
    paper_id = service.list_papers()[0].id

    form = client.get(f"/edit/{paper_id}")
    assert form.status_code == 200
    assert "Draft" in form.text

    response = client.post(
        f"/edit/{paper_id}",
        data={"title": "Final", "link": "https://y", "tags": ["a"], "new_tags": "b"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    paper = service.get(paper_id)
    assert paper.title == "Final"
    assert paper.tag_list == ["a", "b"]


def test_edit_keeps_existing_pdf(client, service):
    client.post(
        "/add",
        data={"title": "P"},
        files={"pdf": ("p.pdf", b"%PDF", "application/pdf")},
    )
    paper = service.list_papers()[0]
    response = client.post(
        f"/edit/{paper.id}",
        data={"title": "P2", "pdf_path": paper.pdf_path},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert service.get(paper.id).pdf_path == paper.pdf_path


def test_invalid_edit_returns_400_and_keeps_record(client, service):
    _add(client, title="Keep", link="https://x")
    paper_id = service.list_papers()[0].id
    response = client.post(f"/edit/{paper_id}", data={"title": "Gone"})
    assert response.status_code == 400
    assert service.get(paper_id).title == "Keep"


def test_edit_missing_paper(client):
    assert client.post("/edit/999", data={"title": "x", "link": "y"}).status_code == 404


def test_importance_toggle_and_set(client, service):
    _add(client, link="https://x")
    paper_id = service.list_papers()[0].id
    headers = {"Accept": "application/json"}

    toggled = client.post(f"/paper/{paper_id}/importance", headers=headers)
    assert toggled.json() == {"id": paper_id, "importance": True}

    cleared = client.post(f"/paper/{paper_id}/importance", data={"important": "0"}, headers=headers)
    assert cleared.json() == {"id": paper_id, "importance": False}
    assert service.get(paper_id).importance is False

    redirect = client.post(
        f"/paper/{paper_id}/importance", data={"important": "1"}, follow_redirects=False
    )
    assert redirect.status_code == 303
    assert service.get(paper_id).importance is True


def test_importance_missing_paper(client):
    response = client.post("/paper/5/importance", headers={"Accept": "application/json"})
    assert response.status_code == 404
    assert "not found" in response.json()["error"]


def test_search_tags_endpoint(client):
    _add(client, link="https://x", new_tags="Machine Learning, NLP, html")
    assert client.get("/search/tags", params={"q": "ml"}).json() == ["html"]
    assert client.get("/search/tags", params={"q": "NL"}).json() == ["NLP"]
    assert client.get("/search/tags", params={"q": ""}).json() == []


def test_search_empty_query_all_policy(tmp_path):
    settings = Settings.load(tmp_path)
    settings.update(empty_query="all")
    client = TestClient(create_app(settings))
    _add(client, link="https://x", new_tags="a, b")
    assert client.get("/search/tags").json() == ["a", "b"]


def test_api_tags(client, service):
    _add(client, link="https://x", new_tags="a")
    paper_id = service.list_papers()[0].id
    assert client.get("/api/tags").json() == {"tags": ["a"], "latest": {"a": paper_id}}


def test_static_script_served(client):
    assert client.get("/static/search.js").status_code == 200


# ── Legacy mode ───────────────────────────────────────────────────────


@pytest.fixture()
def legacy_client(tmp_path):
    settings = Settings.load(tmp_path)
    settings.update(classification_mode="legacy")
    return TestClient(create_app(settings))


def test_legacy_add_and_views(legacy_client):
    legacy_client.post(
        "/add",
        data={"title": "YOLO", "link": "https://y", "category": "CV", "new_subcategory": "Detection"},
    )
    legacy_client.post(
        "/add",
        data={"title": "ViT", "link": "https://v", "category": "NLP", "new_category": "CV"},
    )

    assert legacy_client.get("/subcategories/CV").json() == ["Detection"]

    page = legacy_client.get("/category/CV")
    assert page.status_code == 200
    assert "Detection" in page.text and "未分類" in page.text

    index = legacy_client.get("/")
    assert "/category/CV" in index.text
    assert "NLP" not in index.text

    form = legacy_client.get("/add")
    assert 'name="new_category"' in form.text
