"""Tests for the public signing API."""

import base64
import re
from unittest.mock import AsyncMock

import pytest

from ppc_contracts.core.config import settings
from ppc_contracts.main import app
from ppc_contracts.routes.signing import decode_signature_image
from ppc_contracts.services.assembly.layout import BLANK_LINE
from ppc_contracts.services.dispatch import notification_workflow_id
from ppc_contracts.services.links import decode_token, encode_token
from ppc_contracts.services.signing import InvalidSignature
from ppc_contracts.storage.contracts import StorageError
from helpers import JPEG_BYTES, PNG_BYTES

OWNER = {"X-Owner-Id": "owner-1"}
PNG_B64 = base64.b64encode(PNG_BYTES).decode()


@pytest.fixture
def token(api_client, aca_cpl_payload):
    """Token of a generated ACA CPL contract awaiting both signatures."""
    created = api_client.post("/api/contracts", json=aca_cpl_payload, headers=OWNER).json()
    response = api_client.post(f"/api/contracts/{created['id']}/generate", headers=OWNER)
    assert response.status_code == 200
    return encode_token("owner-1", created["id"])


def _sign(client, token, role, name="Signer", image=PNG_B64):
    return client.post(f"/api/sign/{token}/{role}", json={"signer_name": name, "signature_image": image})


class TestDecodeSignatureImage:
    def test_raw_base64(self):
        assert decode_signature_image(PNG_B64) == PNG_BYTES

    def test_data_url(self):
        assert decode_signature_image(f"data:image/png;base64,{PNG_B64}") == PNG_BYTES

    @pytest.mark.parametrize("value", ["", "   ", "data:image/png;base64,", "not base64!"])
    def test_invalid(self, value):
        with pytest.raises(InvalidSignature):
            decode_signature_image(value)


class TestGetSigningRecord:
    def test_fresh_record(self, api_client, token):
        response = api_client.get(f"/api/sign/{token}")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "awaiting_buyer"
        assert data["buyer_label"] == "Buyer"
        assert data["buyer"] is None and data["publisher"] is None
        assert "Lone Star Health Agency LLC" in data["unsigned_body"]

    def test_malformed_token(self, api_client):
        assert api_client.get("/api/sign/bm9jb2xvbg").status_code == 404

    def test_draft_has_no_signing_record(self, api_client, ppc_payload):
        created = api_client.post("/api/contracts", json=ppc_payload, headers=OWNER).json()

        response = api_client.get(f"/api/sign/{encode_token('owner-1', created['id'])}")
        assert response.status_code == 409


class TestSubmitSignature:
    def test_publisher_then_buyer(self, api_client, token):
        first = _sign(api_client, token, "publisher", name="Sam Patel")
        assert first.status_code == 200
        assert first.json()["status"] == "awaiting_buyer"
        assert first.json()["publisher"]["signer_name"] == "Sam Patel"

        second = _sign(api_client, token, "buyer", name="Dana Reyes")
        assert second.status_code == 200
        assert second.json()["status"] == "fully_signed"
        assert second.json()["buyer"]["signer_name"] == "Dana Reyes"

    def test_second_submission_for_slot_conflicts(self, api_client, token):
        assert _sign(api_client, token, "buyer", name="Dana Reyes").status_code == 200

        response = _sign(api_client, token, "buyer", name="Impostor")

        assert response.status_code == 409
        record = api_client.get(f"/api/sign/{token}").json()
        assert record["buyer"]["signer_name"] == "Dana Reyes"

    def test_unknown_role(self, api_client, token):
        assert _sign(api_client, token, "witness").status_code == 422

    def test_blank_name(self, api_client, token):
        assert _sign(api_client, token, "buyer", name="  ").status_code == 422

    def test_bad_image(self, api_client, token):
        assert _sign(api_client, token, "buyer", image="%%%").status_code == 422

    def test_oversized_image(self, api_client, token, memory_storage):
        big = base64.b64encode(b"\x89PNG" + b"\x00" * (settings.MAX_SIGNATURE_SIZE_KB * 1024)).decode()

        response = _sign(api_client, token, "buyer", image=big)

        assert response.status_code == 413
        assert memory_storage.objects == {}

    def test_storage_outage(self, api_client, token, memory_storage):
        memory_storage.fail_with = StorageError("put", "signatures", None, "connection refused")

        assert _sign(api_client, token, "buyer").status_code == 503

    def test_each_signature_starts_notifications(self, api_client, token):
        app.state.temporal = AsyncMock()

        _sign(api_client, token, "buyer")
        _sign(api_client, token, "publisher")

        ids = [c.kwargs["id"] for c in app.state.temporal.start_workflow.call_args_list]
        assert ids[0].endswith("-awaiting_publisher-b")
        assert ids[1].endswith("-fully_signed-bp")

    def test_publisher_first_gets_its_own_workflow(self, api_client, token):
        _, document_id = decode_token(token)
        app.state.temporal = AsyncMock()

        _sign(api_client, token, "publisher")

        workflow_id = app.state.temporal.start_workflow.call_args.kwargs["id"]
        assert workflow_id == f"signing-{document_id}-awaiting_buyer-p"
        assert workflow_id != notification_workflow_id(document_id, "awaiting_buyer")


class TestSignedDocument:
    def test_document_embeds_captured_signatures(self, api_client, token):
        _sign(api_client, token, "publisher", image=base64.b64encode(JPEG_BYTES).decode())

        response = api_client.get(f"/api/sign/{token}/document")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert response.text.count("data:image/jpeg;base64,") == 1
        assert "data:image/png" not in response.text

    def test_fully_signed_document(self, api_client, token):
        _sign(api_client, token, "buyer")
        _sign(api_client, token, "publisher", image=base64.b64encode(JPEG_BYTES).decode())

        body = api_client.get(f"/api/sign/{token}/document").text

        assert "data:image/png;base64," in body
        assert "data:image/jpeg;base64," in body

    def test_records_signer_names_and_times(self, api_client, token):
        _sign(api_client, token, "buyer", name="Dana Reyes")
        _sign(api_client, token, "publisher", name="Sam <Patel>")

        body = api_client.get(f"/api/sign/{token}/document").text

        assert 'data-slot="buyer">Dana Reyes</span>' in body
        assert 'data-slot="publisher">Sam &lt;Patel&gt;</span>' in body
        for role in ("buyer", "publisher"):
            stamp = re.search(rf'class="signed-on"[^>]*data-slot="{role}">([^<]*)</span>', body)
            assert re.fullmatch(r"[A-Z][a-z]+ \d{1,2}, \d{4} \d{2}:\d{2} UTC", stamp.group(1))
        assert BLANK_LINE not in body

    def test_unsigned_side_keeps_blank_lines(self, api_client, token):
        _sign(api_client, token, "buyer", name="Dana Reyes")

        body = api_client.get(f"/api/sign/{token}/document").text

        assert f'data-slot="publisher">{BLANK_LINE}</span>' in body
        assert body.count(BLANK_LINE) == 2

    def test_later_edits_do_not_change_signed_terms(self, api_client, token, aca_cpl_payload):
        _, document_id = decode_token(token)
        _sign(api_client, token, "buyer")
        _sign(api_client, token, "publisher")

        edited = {**aca_cpl_payload, "acaCplPayout": 1}
        response = api_client.put(f"/api/contracts/{document_id}", json=edited, headers=OWNER)

        assert response.status_code == 409
        body = api_client.get(f"/api/sign/{token}/document").text
        assert "$45.00" in body
        assert "$1.00" not in body

    def test_edit_refused_after_one_signature(self, api_client, token, aca_cpl_payload):
        _, document_id = decode_token(token)
        _sign(api_client, token, "publisher")

        edited = {**aca_cpl_payload, "acaCplPayout": 1}
        response = api_client.put(f"/api/contracts/{document_id}", json=edited, headers=OWNER)

        assert response.status_code == 409
        stored = api_client.get(f"/api/contracts/{document_id}", headers=OWNER).json()
        assert stored["request"]["acaCplPayout"] == 45

    def test_default_state_change_after_generation(self, api_client, ppc_payload, monkeypatch):
        created = api_client.post("/api/contracts", json=ppc_payload, headers=OWNER).json()
        api_client.post(f"/api/contracts/{created['id']}/generate", headers=OWNER)
        ppc_token = encode_token("owner-1", created["id"])
        monkeypatch.setattr(settings, "DEFAULT_GOVERNING_STATE", "Nevada")
        _sign(api_client, ppc_token, "buyer")

        body = api_client.get(f"/api/sign/{ppc_token}/document").text

        assert "State of Delaware" in body
        assert "Nevada" not in body
