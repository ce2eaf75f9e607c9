def _create_garment(client, name: str) -> str:
    resp = client.post("/garments", json={"name": name, "image_url": f"https://img.example.com/{name}.jpg", "category": "tops"})
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_batch_job_end_to_end(client, gateway):
    shirt = _create_garment(client, "shirt")
    jacket = _create_garment(client, "jacket")
    gateway.failures["https://img.example.com/jacket.jpg"] = "quota exceeded"

    create_resp = client.post(
        "/batch-jobs",
        json={
            "name": "Autumn campaign",
            "garment_ids": [shirt, jacket],
            "configuration": {"gender": "female", "environment": "urban"},
            "priority": 7,
        },
    )
    assert create_resp.status_code == 201, create_resp.text
    job = create_resp.json()
    assert job["status"] == "pending"
    assert job["total_items"] == 2
    assert job["processed_items"] == 0

    start_resp = client.post(f"/batch-jobs/{job['id']}/start")
    assert start_resp.status_code == 202, start_resp.text
    assert start_resp.json()["status"] == "completed"

    job_resp = client.get(f"/batch-jobs/{job['id']}")
    assert job_resp.status_code == 200
    body = job_resp.json()
    assert body["processed_items"] == 2
    assert body["successful_items"] == 1
    assert body["failed_garment_ids"] == [jacket]
    assert body["error_log"][0]["error"] == "quota exceeded"
    assert "professional female fashion model" in gateway.calls[0][0]

    images = client.get("/generated-images", params={"garment_id": shirt}).json()
    assert len(images) == 1
    assert images[0]["image_url"].startswith("https://cdn.example.com/generated/")

    assert client.post(f"/batch-jobs/{job['id']}/start").status_code == 409

    gateway.failures.clear()
    retry_resp = client.post(f"/batch-jobs/{job['id']}/retry")
    assert retry_resp.status_code == 202, retry_resp.text
    retried = client.get(f"/batch-jobs/{job['id']}").json()
    assert retried["status"] == "completed"
    assert retried["successful_items"] == 2
    assert retried["failed_garment_ids"] == []

    assert client.post(f"/batch-jobs/{job['id']}/retry").status_code == 409


def test_deleted_garment_is_reported_not_generated(client, gateway):
    keep = _create_garment(client, "keep")
    gone = _create_garment(client, "gone")
    job = client.post("/batch-jobs", json={"name": "Cleanup", "garment_ids": [keep, gone]}).json()

    assert client.delete(f"/garments/{gone}").status_code == 204
    client.post(f"/batch-jobs/{job['id']}/start")

    body = client.get(f"/batch-jobs/{job['id']}").json()
    assert body["failed_garment_ids"] == [gone]
    assert body["error_log"][0]["error"] == "Garment not found"
    assert len(gateway.calls) == 1


def test_create_batch_job_validation(client):
    assert client.post("/batch-jobs", json={"name": "Empty", "garment_ids": []}).status_code == 422
    assert client.post("/batch-jobs", json={"name": "   ", "garment_ids": ["g1"]}).status_code == 422
    assert client.post("/batch-jobs", json={"name": "Urgent", "garment_ids": ["g1"], "priority": 11}).status_code == 422


def test_list_sort_and_delete(client):
    low = client.post("/batch-jobs", json={"name": "Low", "garment_ids": ["g1"], "priority": 2}).json()
    high = client.post("/batch-jobs", json={"name": "High", "garment_ids": ["g1"], "priority": 9}).json()
    other = client.post("/batch-jobs", json={"name": "Other", "garment_ids": ["g1"]}).json()

    by_priority = client.get("/batch-jobs", params={"sort": "-priority"}).json()
    assert [job["name"] for job in by_priority] == ["High", "Other", "Low"]
    assert client.get("/batch-jobs", params={"sort": "-bogus"}).status_code == 422

    assert client.delete(f"/batch-jobs/{other['id']}").status_code == 204
    assert client.get(f"/batch-jobs/{other['id']}").status_code == 404
    assert client.delete(f"/batch-jobs/{other['id']}").status_code == 404

    bulk = client.post("/batch-jobs/bulk-delete", json={"ids": [low["id"], high["id"], "missing"]})
    assert bulk.status_code == 200
    assert bulk.json() == {"deleted": 2}
    assert client.get("/batch-jobs").json() == []


def test_start_unknown_job_returns_404(client):
    assert client.post("/batch-jobs/does-not-exist/start").status_code == 404
    assert client.post("/batch-jobs/does-not-exist/retry").status_code == 404


def test_garment_upload_stores_image(client):
    resp = client.post(
        "/garments/upload",
        files={"file": ("dress.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
        data={"name": "Dress", "category": "dresses"},
    )
    assert resp.status_code == 201, resp.text
    image_url = resp.json()["image_url"]
    assert image_url.startswith("/media/garments/")
    assert client.get(image_url).status_code == 200

    bad = client.post("/garments/upload", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert bad.status_code == 400


def test_upload_fills_missing_details_from_image_analysis(client, gateway):
    gateway.llm_reply = {"name": "Linen shirt", "category": "tops", "description": "A relaxed white linen shirt."}

    resp = client.post(
        "/garments/upload",
        files={"file": ("shirt.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
        data={"name": "Summer shirt"},
    )

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["name"] == "Summer shirt"
    assert body["category"] == "tops"
    assert body["description"] == "A relaxed white linen shirt."
    assert len(gateway.llm_calls) == 1
    assert gateway.llm_calls[0][1] == [body["image_url"]]


def test_upload_skips_analysis_when_details_are_complete(client, gateway):
    resp = client.post(
        "/garments/upload",
        files={"file": ("coat.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
        data={"name": "Coat", "category": "outerwear", "description": "Wool coat"},
    )

    assert resp.status_code == 201, resp.text
    assert gateway.llm_calls == []


def test_upload_keeps_going_when_analysis_fails(client, gateway):
    gateway.llm_error = "vision model unavailable"

    resp = client.post(
        "/garments/upload",
        files={"file": ("scarf.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
        data={"name": "Scarf"},
    )

    assert resp.status_code == 201, resp.text
    assert resp.json()["category"] is None
    assert resp.json()["description"] is None


def test_upload_rejects_unknown_category(client, gateway):
    resp = client.post(
        "/garments/upload",
        files={"file": ("hat.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
        data={"name": "Hat", "category": "hats"},
    )

    assert resp.status_code == 422
    assert gateway.llm_calls == []
    assert client.get("/garments").json() == []


def test_fashion_model_and_brand_seed_crud(client):
    persona = client.post("/fashion-models", json={"name": "Ava", "gender": "female", "prompt": "tall model with short hair"})
    assert persona.status_code == 201, persona.text
    persona_id = persona.json()["id"]
    assert client.get(f"/fashion-models/{persona_id}").json()["prompt"] == "tall model with short hair"
    assert [item["id"] for item in client.get("/fashion-models").json()] == [persona_id]
    assert client.post("/fashion-models", json={"gender": "robot"}).status_code == 422

    seed = client.post("/brand-seeds", json={"name": "Nordic", "brand_style": "clean lines", "character": "minimalist"})
    assert seed.status_code == 201, seed.text
    seed_id = seed.json()["id"]
    assert client.get(f"/brand-seeds/{seed_id}").json()["character"] == "minimalist"
    assert client.post("/brand-seeds", json={"name": "   "}).status_code == 422

    assert client.delete(f"/fashion-models/{persona_id}").status_code == 204
    assert client.get(f"/fashion-models/{persona_id}").status_code == 404
    assert client.delete(f"/brand-seeds/{seed_id}").status_code == 204
    assert client.delete(f"/brand-seeds/{seed_id}").status_code == 404


def test_batch_job_prompt_uses_persona_and_brand_seed(client, gateway):
    shirt = _create_garment(client, "shirt")
    persona_id = client.post("/fashion-models", json={"name": "Ava", "gender": "female", "prompt": "tall model with short hair"}).json()["id"]
    seed_id = client.post("/brand-seeds", json={"name": "Nordic", "brand_style": "clean lines", "character": "minimalist"}).json()["id"]

    job_id = client.post(
        "/batch-jobs",
        json={
            "name": "Persona run",
            "garment_ids": [shirt],
            "configuration": {"model_id": persona_id, "brand_seed_id": seed_id, "environment": "urban"},
        },
    ).json()["id"]
    assert client.post(f"/batch-jobs/{job_id}/start").status_code == 202

    assert client.get(f"/batch-jobs/{job_id}").json()["status"] == "completed"
    prompt, images = gateway.calls[0]
    assert prompt.startswith("tall model with short hair wearing the garment. ")
    assert "Style: clean lines. Character: minimalist. " in prompt
    assert "Urban street photography" in prompt
    assert images == ["https://img.example.com/shirt.jpg"]
