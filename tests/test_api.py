import time
from pathlib import Path

from conftest import DOCX_MIME, PDF_MIME, PNG_MIME, make_docx_bytes, make_png_bytes, upload


def wait_for_job(client, job_id, timeout=5.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        job = client.get(f"/api/ocr/job/{job_id}").json()
        if job["status"] in ("completed", "failed"):
            return job
        time.sleep(0.05)
    raise AssertionError(f"job {job_id} did not finish")


def only_job_id(client):
    app_queue = client.app.state.ocr_queue
    assert len(app_queue.jobs) == 1
    return app_queue.jobs[0].id


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "healthy"

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"

    ready = client.get("/ready")
    assert ready.status_code == 200
    assert ready.json() == {"ready": True, "documents": 0}


def test_request_id_is_echoed(client):
    response = client.get("/api/documents", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert client.get("/api/documents").headers["X-Request-ID"]


def test_word_upload_extracts_text_without_ocr_job(client, upload_dir):
    data = make_docx_bytes("Contrato de prestação de serviços", "Cláusula primeira")
    response = upload(client, [("contract.docx", data, DOCX_MIME)], title="Contract A", category="contrato")

    assert response.status_code == 200
    documents = response.json()["documents"]
    assert len(documents) == 1
    doc = documents[0]

    assert doc["title"] == "Contract A"
    assert doc["category"] == "contrato"
    assert "Contrato de prestação de serviços" in doc["extractedText"]
    assert doc["ocrProcessed"] is False
    assert doc["mimeType"] == DOCX_MIME
    assert doc["originalName"] == "contract.docx"
    assert doc["fileSize"] == len(data)
    assert doc["fileName"].endswith("-contract.docx")

    stored = Path(doc["filePath"])
    assert stored.parent == upload_dir
    assert stored.read_bytes() == data

    assert client.get("/api/ocr/status").json()["total"] == 0


def test_image_upload_with_short_text_is_queued_and_completed(client, extraction_service):
    response = upload(client, [("scan.png", make_png_bytes(), PNG_MIME)], title="Digitalização")
    assert response.status_code == 200
    doc = response.json()["documents"][0]

    job_id = only_job_id(client)
    assert job_id.startswith(f"{doc['id']}-")

    job = wait_for_job(client, job_id)
    assert job["status"] == "completed"
    assert job["documentId"] == doc["id"]
    assert job["processedAt"] is not None
    assert job["error"] is None

    refreshed = client.get(f"/api/documents/{doc['id']}").json()
    assert refreshed["ocrProcessed"] is True
    assert refreshed["extractedText"] == extraction_service.advanced_text

    status = client.get("/api/ocr/status").json()
    assert status == {"total": 1, "pending": 0, "processing": 0, "completed": 1, "failed": 0}


def test_image_with_enough_quick_text_is_not_queued(client, extraction_service):
    extraction_service.quick_text = "texto " * 30
    response = upload(client, [("scan.png", make_png_bytes(), PNG_MIME)])

    assert response.status_code == 200
    assert client.get("/api/ocr/status").json()["total"] == 0


def test_multiple_files_share_metadata(client):
    files = [
        ("a.docx", make_docx_bytes("primeiro"), DOCX_MIME),
        ("b.pdf", b"%PDF-1.4 stub", PDF_MIME),
    ]
    response = upload(client, files, title="Lote", category="fiscal", tags=["2024", "lote"])

    documents = response.json()["documents"]
    assert [d["originalName"] for d in documents] == ["a.docx", "b.pdf"]
    assert all(d["title"] == "Lote" and d["tags"] == ["2024", "lote"] for d in documents)
    # Only the PDF (empty quick text) gets an advanced pass
    assert client.get("/api/ocr/status").json()["total"] == 1


def test_upload_without_files_is_rejected(client):
    response = client.post("/api/documents", data={"metadata": '{"title": "x", "category": "y"}'})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "No files uploaded"
    assert body["status_code"] == 400
    assert body["path"] == "/api/documents"
    assert body["request_id"]


def test_upload_with_invalid_metadata_creates_nothing(client, upload_dir):
    response = upload(client, [("a.docx", make_docx_bytes("x"), DOCX_MIME)], title="   ")

    assert response.status_code == 400
    assert "title" in response.json()["message"]
    assert client.get("/api/documents").json()["total"] == 0
    assert list(upload_dir.iterdir()) == []


def test_upload_with_malformed_metadata_json(client):
    response = client.post(
        "/api/documents",
        files=[("files", ("a.docx", make_docx_bytes("x"), DOCX_MIME))],
        data={"metadata": "{not json"},
    )
    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid metadata JSON")


def test_unsupported_type_rejects_whole_request(client, upload_dir):
    files = [
        ("a.docx", make_docx_bytes("x"), DOCX_MIME),
        ("notes.txt", b"plain text", "text/plain"),
    ]
    response = upload(client, files)

    assert response.status_code == 400
    assert "File type not supported" in response.json()["message"]
    assert client.get("/api/documents").json()["total"] == 0
    assert list(upload_dir.iterdir()) == []


def test_file_too_large(client):
    client.app.state.upload_service.max_upload_size = 10
    response = upload(client, [("a.docx", make_docx_bytes("x"), DOCX_MIME)])

    assert response.status_code == 413
    assert response.json()["message"].startswith("File too large")
    assert client.get("/api/documents").json()["total"] == 0


def test_get_missing_document(client):
    response = client.get("/api/documents/999")
    assert response.status_code == 404
    assert response.json()["message"] == "Document not found"


def test_download_returns_original_name(client):
    data = make_docx_bytes("conteúdo")
    doc = upload(client, [("relatório.docx", data, DOCX_MIME)]).json()["documents"][0]

    response = client.get(f"/api/documents/{doc['id']}/download")
    assert response.status_code == 200
    assert response.content == data
    assert "attachment" in response.headers["content-disposition"]
    assert response.headers["content-type"].startswith(DOCX_MIME)


def test_download_with_missing_file(client):
    doc = upload(client, [("a.docx", make_docx_bytes("x"), DOCX_MIME)]).json()["documents"][0]
    Path(doc["filePath"]).unlink()

    response = client.get(f"/api/documents/{doc['id']}/download")
    assert response.status_code == 404
    assert response.json()["message"] == "File not found on disk"


def test_patch_updates_metadata(client):
    doc = upload(client, [("a.docx", make_docx_bytes("x"), DOCX_MIME)]).json()["documents"][0]

    response = client.patch(
        f"/api/documents/{doc['id']}",
        json={"title": "Contrato revisado", "department": "Jurídico", "documentDate": "2024-03-15"},
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["title"] == "Contrato revisado"
    assert updated["department"] == "Jurídico"
    assert updated["documentDate"].startswith("2024-03-15T00:00:00")
    assert updated["category"] == doc["category"]


def test_patch_rejects_empty_title(client):
    doc = upload(client, [("a.docx", make_docx_bytes("x"), DOCX_MIME)]).json()["documents"][0]

    assert client.patch(f"/api/documents/{doc['id']}", json={"title": None}).status_code == 400
    assert client.patch(f"/api/documents/{doc['id']}", json={"title": ""}).status_code == 422


def test_patch_missing_document(client):
    response = client.patch("/api/documents/42", json={"title": "x"})
    assert response.status_code == 404


def test_delete_removes_file_and_row(client):
    doc = upload(client, [("a.docx", make_docx_bytes("x"), DOCX_MIME)]).json()["documents"][0]

    response = client.delete(f"/api/documents/{doc['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Document deleted successfully"}
    assert not Path(doc["filePath"]).exists()
    assert client.get(f"/api/documents/{doc['id']}").status_code == 404
    assert client.delete(f"/api/documents/{doc['id']}").status_code == 404


def test_reprocess_queues_job(client):
    doc = upload(client, [("a.docx", make_docx_bytes("x"), DOCX_MIME)]).json()["documents"][0]

    response = client.post(f"/api/documents/{doc['id']}/reprocess")
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Document queued for reprocessing"
    assert body["jobId"].startswith(f"{doc['id']}-")

    job = wait_for_job(client, body["jobId"])
    assert job["status"] == "completed"


def test_reprocess_with_file_deleted_from_disk(client):
    doc = upload(client, [("a.docx", make_docx_bytes("x"), DOCX_MIME)]).json()["documents"][0]
    Path(doc["filePath"]).unlink()

    response = client.post(f"/api/documents/{doc['id']}/reprocess")
    assert response.status_code == 404
    assert response.json()["message"] == "File not found on disk"
    assert client.get("/api/ocr/status").json()["total"] == 0


def test_reprocess_missing_document(client):
    response = client.post("/api/documents/7/reprocess")
    assert response.status_code == 404
    assert response.json()["message"] == "Document not found"


def test_unknown_job(client):
    response = client.get("/api/ocr/job/1-123")
    assert response.status_code == 404
    assert response.json()["message"] == "Job not found"


def test_search_filters_and_pagination(client):
    upload(client, [("a.docx", make_docx_bytes("folha de pagamento"), DOCX_MIME)],
           title="Folha março", category="rh", department="Pessoal", documentDate="2024-03-01")
    upload(client, [("b.docx", make_docx_bytes("contrato de aluguel"), DOCX_MIME)],
           title="Aluguel sede", category="contrato", department="Jurídico", documentDate="2023-06-10")
    upload(client, [("c.docx", make_docx_bytes("contrato de serviço"), DOCX_MIME)],
           title="Serviços TI", category="contrato", department="TI")

    everything = client.get("/api/documents").json()
    assert everything["total"] == 3
    assert [d["title"] for d in everything["documents"]] == ["Serviços TI", "Aluguel sede", "Folha março"]

    by_text = client.get("/api/documents", params={"query": "CONTRATO"}).json()
    assert by_text["total"] == 2

    combined = client.get("/api/documents", params={"query": "contrato", "department": "TI"}).json()
    assert [d["title"] for d in combined["documents"]] == ["Serviços TI"]

    dated = client.get("/api/documents", params={"dateFrom": "2024-01-01", "dateTo": "2024-03-01"}).json()
    assert [d["title"] for d in dated["documents"]] == ["Folha março"]

    by_date = client.get("/api/documents", params={"sortBy": "date-asc"}).json()
    assert [d["title"] for d in by_date["documents"]] == ["Aluguel sede", "Folha março", "Serviços TI"]

    second_page = client.get("/api/documents", params={"page": 2, "limit": 2}).json()
    assert second_page["total"] == 3
    assert [d["title"] for d in second_page["documents"]] == ["Folha março"]


def test_search_rejects_bad_parameters(client):
    assert client.get("/api/documents", params={"sortBy": "popularity"}).status_code == 400
    assert client.get("/api/documents", params={"dateFrom": "yesterday"}).status_code == 400
    assert client.get("/api/documents", params={"limit": 0}).status_code == 422
    assert client.get("/api/documents", params={"page": 0}).status_code == 422
