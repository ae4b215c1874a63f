"""Tests for notification composition and workflow dispatch."""

from datetime import datetime

import pytest
from temporalio.exceptions import WorkflowAlreadyStartedError

from ppc_contracts.schemas.agreement import AgreementRequest
from ppc_contracts.services.dispatch import notification_workflow_id, start_signing_notifications
from ppc_contracts.services.notifications import compose_notifications, party_contacts
from ppc_contracts.services.signing import SignatureSlot, SignerRole, SigningRecord

SIGNED = SignatureSlot(signer_name="Someone", image_key="k", signed_at=datetime(2026, 3, 2))


def _record(buyer=None, publisher=None, labels=("Buyer", "Publisher")):
    return SigningRecord(
        owner_id="owner-1",
        document_id="doc-1",
        unsigned_body="<div/>",
        buyer_label=labels[0],
        publisher_label=labels[1],
        buyer=buyer,
        publisher=publisher,
    )


class TestComposeNotifications:
    def test_new_record_asks_both_parties(self, aca_cpl_request):
        messages = compose_notifications(aca_cpl_request, _record(), base_url="https://sign.example")

        assert [m["to"] for m in messages] == [["buyer@lonestar.example"], ["ops@brightleads.example"]]
        assert messages[0]["subject"] == "Signature requested: Buyer"
        assert "Hello Dana Reyes," in messages[0]["html"]
        assert "https://sign.example/sign?contract=" in messages[0]["html"]
        assert "role=buyer" in messages[0]["html"]

    def test_only_unsigned_party_is_asked(self, aca_cpl_request):
        messages = compose_notifications(aca_cpl_request, _record(buyer=SIGNED))

        assert len(messages) == 1
        assert messages[0]["to"] == ["ops@brightleads.example"]
        assert "role=publisher" in messages[0]["html"]

    def test_fully_signed_tells_everyone(self, aca_cpl_request):
        messages = compose_notifications(aca_cpl_request, _record(buyer=SIGNED, publisher=SIGNED))

        assert len(messages) == 2
        assert {m["subject"] for m in messages} == {"Contract fully executed"}

    def test_party_without_email_is_skipped(self, aca_cpl_payload):
        aca_cpl_payload["publisher"]["email"] = None
        request = AgreementRequest.model_validate(aca_cpl_payload)

        messages = compose_notifications(request, _record())

        assert [m["to"] for m in messages] == [["buyer@lonestar.example"]]

    def test_names_are_escaped(self, aca_cpl_payload):
        aca_cpl_payload["buyer"]["contactName"] = "<b>Dana</b>"
        messages = compose_notifications(AgreementRequest.model_validate(aca_cpl_payload), _record())

        assert "<b>Dana</b>" not in messages[0]["html"]
        assert "&lt;b&gt;Dana&lt;/b&gt;" in messages[0]["html"]


def test_llc_contacts_come_from_members():
    request = AgreementRequest.model_validate(
        {
            "contractType": "LLCOperatingAgreement",
            "llcInvestor": {"name": "Ivy Investor", "email": "ivy@example.com"},
            "llcManagingMember": {"name": "Max Manager", "email": "max@example.com"},
        }
    )
    contacts = party_contacts(request)

    assert contacts[SignerRole.buyer].email == "ivy@example.com"
    assert contacts[SignerRole.publisher].name == "Max Manager"


def test_contact_falls_back_to_company_name():
    request = AgreementRequest.model_validate({"buyer": {"companyName": "Acme", "email": "a@acme.example"}})
    assert party_contacts(request)[SignerRole.buyer].name == "Acme"


class TestStartSigningNotifications:
    @pytest.mark.asyncio
    async def test_starts_workflow_keyed_by_state(self, mock_temporal):
        workflow_id = await start_signing_notifications(mock_temporal, "owner-1", "doc-1", "awaiting_buyer")

        assert workflow_id == "signing-doc-1-awaiting_buyer"
        mock_temporal.start_workflow.assert_awaited_once()
        kwargs = mock_temporal.start_workflow.call_args.kwargs
        assert kwargs["id"] == notification_workflow_id("doc-1", "awaiting_buyer")
        assert kwargs["args"] == ["owner-1", "doc-1"]

    @pytest.mark.parametrize(
        "status, roles, expected",
        [
            ("awaiting_buyer", (), "signing-doc-1-awaiting_buyer"),
            ("awaiting_buyer", ("publisher",), "signing-doc-1-awaiting_buyer-p"),
            ("awaiting_publisher", ("buyer",), "signing-doc-1-awaiting_publisher-b"),
            ("fully_signed", ("publisher", "buyer"), "signing-doc-1-fully_signed-bp"),
        ],
    )
    def test_workflow_id_includes_filled_slots(self, status, roles, expected):
        assert notification_workflow_id("doc-1", status, roles) == expected

    @pytest.mark.asyncio
    async def test_publisher_first_does_not_reuse_generate_id(self, mock_temporal):
        await start_signing_notifications(mock_temporal, "owner-1", "doc-1", "awaiting_buyer")
        await start_signing_notifications(mock_temporal, "owner-1", "doc-1", "awaiting_buyer", ("publisher",))

        ids = [c.kwargs["id"] for c in mock_temporal.start_workflow.call_args_list]
        assert ids == ["signing-doc-1-awaiting_buyer", "signing-doc-1-awaiting_buyer-p"]

    @pytest.mark.asyncio
    async def test_duplicate_start_is_ignored(self, mock_temporal):
        mock_temporal.start_workflow.side_effect = WorkflowAlreadyStartedError(
            "signing-doc-1-fully_signed", "SigningNotificationWorkflow"
        )

        assert await start_signing_notifications(mock_temporal, "owner-1", "doc-1", "fully_signed") is None

    @pytest.mark.asyncio
    async def test_without_temporal_client(self, caplog):
        assert await start_signing_notifications(None, "owner-1", "doc-1", "awaiting_buyer") is None
        assert "Temporal not connected" in caplog.text
