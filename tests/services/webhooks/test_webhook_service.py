"""
Tests for WebhookService event routing, signature checks and PR upserts.
"""

import json
import uuid

import pytest
from unittest.mock import MagicMock

from src.models.db import PullRequest
from src.services.webhooks.webhook_service import WebhookService
from src.utils.exception import BadRequestException, UnauthorizedException


@pytest.fixture
def mock_orchestrator():
    orchestrator = MagicMock()
    orchestrator.trigger_review.return_value = uuid.uuid4()
    return orchestrator


@pytest.fixture
def service(db_session, mock_orchestrator):
    return WebhookService(db_session, mock_orchestrator)


def encode(payload) -> bytes:
    return json.dumps(payload).encode()


@pytest.mark.asyncio
async def test_non_pull_request_event_is_ignored(service, mock_orchestrator):
    result = await service.handle_event("push", b"{}", None)

    assert result.status_code == 200
    assert result.body == {"message": "Ignored event: push"}
    mock_orchestrator.trigger_review.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("action", ["closed", "edited", "labeled"])
async def test_non_triggering_action_is_ignored(service, mock_orchestrator, pull_request_event, action):
    result = await service.handle_event("pull_request", encode(pull_request_event(action=action)), None)

    assert result.status_code == 200
    assert result.body == {"message": f"Ignored action: {action}"}
    mock_orchestrator.trigger_review.assert_not_called()


@pytest.mark.asyncio
async def test_unregistered_repository(service, mock_orchestrator, pull_request_event):
    body = encode(pull_request_event(repo_full_name="stranger/repo"))

    result = await service.handle_event("pull_request", body, None)

    assert result.status_code == 200
    assert result.body == {"message": "Repository stranger/repo not registered"}
    mock_orchestrator.trigger_review.assert_not_called()


@pytest.mark.asyncio
async def test_invalid_json(service):
    with pytest.raises(BadRequestException):
        await service.handle_event("pull_request", b"{not json", None)


@pytest.mark.asyncio
async def test_payload_missing_pull_request(service):
    with pytest.raises(BadRequestException):
        await service.handle_event("pull_request", encode({"action": "opened"}), None)


@pytest.mark.asyncio
async def test_bad_signature_is_rejected(
    service, mock_orchestrator, registered_repository, pull_request_event, sign_payload, db_session
):
    body = encode(pull_request_event())

    with pytest.raises(UnauthorizedException):
        await service.handle_event("pull_request", body, sign_payload(body, "wrong-secret"))

    assert db_session.query(PullRequest).count() == 0
    mock_orchestrator.trigger_review.assert_not_called()


@pytest.mark.asyncio
async def test_missing_signature_is_rejected(service, registered_repository, pull_request_event):
    with pytest.raises(UnauthorizedException):
        await service.handle_event("pull_request", encode(pull_request_event()), None)


@pytest.mark.asyncio
async def test_signature_over_different_body_is_rejected(
    service, registered_repository, pull_request_event, sign_payload
):
    signed = encode(pull_request_event(title="original"))
    tampered = encode(pull_request_event(title="tampered"))

    with pytest.raises(UnauthorizedException):
        await service.handle_event("pull_request", tampered, sign_payload(signed))


@pytest.mark.asyncio
async def test_signed_delivery_triggers_review(
    service, mock_orchestrator, registered_repository, pull_request_event, sign_payload, db_session
):
    body = encode(pull_request_event(action="opened", number=42))

    result = await service.handle_event("pull_request", body, sign_payload(body))

    pull_request = db_session.query(PullRequest).one()
    assert result.status_code == 201
    assert result.body == {
        "message": "Review triggered",
        "reviewTriggered": True,
        "pullRequestId": str(pull_request.id),
        "reviewId": str(mock_orchestrator.trigger_review.return_value),
    }
    assert pull_request.number == 42
    assert pull_request.author == "test-contributor"
    assert pull_request.status == "open"
    mock_orchestrator.trigger_review.assert_called_once_with(pull_request.id)


@pytest.mark.asyncio
async def test_repository_without_secret_skips_verification(
    service, mock_orchestrator, unsigned_repository, pull_request_event
):
    body = encode(pull_request_event(repo_full_name="test-owner/open-repo"))

    result = await service.handle_event("pull_request", body, None)

    assert result.status_code == 201
    mock_orchestrator.trigger_review.assert_called_once()


@pytest.mark.asyncio
async def test_merged_pull_request_status(
    service, unsigned_repository, pull_request_event, db_session
):
    body = encode(pull_request_event(
        action="reopened", repo_full_name="test-owner/open-repo", state="closed", merged=True
    ))

    await service.handle_event("pull_request", body, None)

    assert db_session.query(PullRequest).one().status == "merged"


@pytest.mark.asyncio
async def test_trigger_failure_still_acknowledges(
    service, mock_orchestrator, unsigned_repository, pull_request_event, db_session
):
    mock_orchestrator.trigger_review.side_effect = RuntimeError("pool closed")
    body = encode(pull_request_event(repo_full_name="test-owner/open-repo"))

    result = await service.handle_event("pull_request", body, None)

    assert result.status_code == 201
    assert result.body["reviewTriggered"] is False
    assert result.body["reviewId"] is None
    assert db_session.query(PullRequest).count() == 1
