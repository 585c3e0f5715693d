from conftest import MIB, StubUploader, image_bytes

from photodrop.services.media import MediaUploadError

XFF = {"X-Forwarded-For": "1.2.3.4"}


def post_photo(client, prenom="Marie", data=None, content_type="image/png", filename="photo.png", headers=XFF):
    if data is None:
        data = image_bytes("PNG")
    return client.post(
        "/upload",
        data={"prenom": prenom},
        files={"photo": (filename, data, content_type)},
        headers=headers,
    )


def test_form_page(client):
    response = client.get("/", headers=XFF)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert 'enctype="multipart/form-data"' in response.text
    assert 'name="prenom"' in response.text
    assert "Photos restantes aujourd’hui : 3" in response.text


def test_upload_valid_png(client, uploader):
    response = post_photo(client, prenom="Marie É!!", data=image_bytes("PNG", size=2 * MIB))

    assert response.status_code == 200
    assert "Merci pour votre participation" in response.text
    assert len(uploader.calls) == 1
    _, descriptor = uploader.calls[0]
    assert descriptor.public_id.startswith("Marie_É_")
    assert client.get("/api/quota", headers=XFF).json()["used"] == 1


def test_fourth_submission_is_refused(client, uploader):
    for _ in range(3):
        assert post_photo(client).status_code == 200

    response = post_photo(client)

    assert response.status_code == 429
    assert "Limite atteinte" in response.text
    assert len(uploader.calls) == 3


def test_quota_is_per_identity(client, uploader):
    for _ in range(3):
        post_photo(client)

    response = post_photo(client, headers={"X-Forwarded-For": "5.6.7.8, 10.0.0.1"})

    assert response.status_code == 200
    assert len(uploader.calls) == 4


def test_rejects_pdf(client, uploader):
    response = post_photo(client, data=b"%PDF-1.4 fake", content_type="application/pdf", filename="cv.pdf")

    assert response.status_code == 415
    assert "JPG ou PNG" in response.text
    assert uploader.calls == []


def test_rejects_oversized_file(client, uploader):
    response = post_photo(client, data=image_bytes("PNG", size=11 * MIB))

    assert response.status_code == 413
    assert uploader.calls == []


def test_rejects_missing_name(client, uploader):
    response = post_photo(client, prenom="")

    assert response.status_code == 400
    assert "Prénom et image requis." in response.text
    assert uploader.calls == []


def test_rejects_missing_file(client, uploader):
    response = client.post("/upload", data={"prenom": "Marie"}, files={"other": ("x.txt", b"x", "text/plain")}, headers=XFF)

    assert response.status_code == 400
    assert uploader.calls == []


def test_upload_error_is_not_counted(client, gate):
    gate.uploader = StubUploader(error=MediaUploadError("S3 down: secret-detail"))

    response = post_photo(client)

    assert response.status_code == 500
    assert "Erreur lors de l’upload." in response.text
    assert "secret-detail" not in response.text
    assert client.get("/api/quota", headers=XFF).json()["used"] == 0


def test_quota_status(client):
    post_photo(client)

    data = client.get("/api/quota", headers=XFF).json()

    assert data == {"limit": 3, "used": 1, "remaining": 2, "day": "2024-06-01"}


def test_health_check(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_burst_limit_returns_html_429(client, uploader):
    headers = {"X-Forwarded-For": "9.9.9.9"}
    for _ in range(10):
        assert post_photo(client, prenom="", headers=headers).status_code == 400

    response = post_photo(client, prenom="", headers=headers)

    assert response.status_code == 429
    assert "Trop de tentatives" in response.text
    assert uploader.calls == []
