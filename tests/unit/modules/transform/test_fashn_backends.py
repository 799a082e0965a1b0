"""Tests for the FASHN client and the sync/async submission backends."""

from unittest.mock import AsyncMock, patch

import pytest

from src.api.core.constants import MAX_SEED, MIN_SEED
from src.api.core.exceptions.base import InvalidInputError, ProviderError
from src.api.core.messages import MessageCode
from src.api.transform.schemas import PredictionJob
from src.modules.transform.backends import (
    SubmitAndTrackBackend,
    SubmitAndWaitBackend,
    TransformMode,
    build_inputs,
    create_backend,
    generate_seed,
)
from src.modules.transform.infrastructure.fashn_client import FashnClient
from src.modules.transform.poller import ResultPoller

AVATAR = "https://proxy/x/alice"


def test_seed_stays_in_unsigned_32_bit_range():
    for _ in range(200):
        assert MIN_SEED <= generate_seed() <= MAX_SEED


@pytest.mark.parametrize("bound", [MIN_SEED, MAX_SEED])
def test_seed_bounds_are_inclusive(bound):
    with patch("src.modules.transform.backends.random.randint", return_value=bound) as randint:
        assert generate_seed() == bound

    randint.assert_called_once_with(0, 2**32 - 1)


def test_build_inputs_uses_configured_aspect_ratio():
    inputs = build_inputs(AVATAR)

    assert inputs.face_image == AVATAR
    assert inputs.aspect_ratio == "2:3"
    assert set(inputs.model_dump()) == {"face_image", "seed", "aspect_ratio"}


def test_build_inputs_accepts_explicit_aspect_ratio():
    assert build_inputs(AVATAR, "1:1").aspect_ratio == "1:1"


@pytest.mark.asyncio
async def test_run_posts_model_and_inputs(fashn_client):
    inputs = {"face_image": AVATAR, "seed": 7, "aspect_ratio": "2:3"}
    with patch.object(
        FashnClient, "_request", AsyncMock(return_value=(200, {"id": "pred-1"}))
    ) as request:
        data = await fashn_client.run("face-to-model", inputs)

    assert data == {"id": "pred-1"}
    request.assert_awaited_once_with(
        "POST",
        "/run",
        json={"model_name": "face-to-model", "inputs": inputs},
        failure_code=MessageCode.TRANSFORM_START_FAILED,
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [["not", "an", "object"], {"error": "bad input"}])
async def test_run_rejects_error_bodies(fashn_client, body):
    with patch.object(FashnClient, "_request", AsyncMock(return_value=(200, body))):
        with pytest.raises(ProviderError) as exc_info:
            await fashn_client.run("face-to-model", {})

    # Provider detail stays in the logs
    assert exc_info.value.message == "Failed to start transformation"


@pytest.mark.asyncio
async def test_status_parses_job(fashn_client):
    payload = {"id": "42", "status": "completed", "output": ["https://cdn/x.png"], "error": None}
    with patch.object(FashnClient, "_request", AsyncMock(return_value=(200, payload))) as request:
        job = await fashn_client.status("42")

    assert job.status == "completed"
    assert job.output == ["https://cdn/x.png"]
    assert job.is_terminal
    request.assert_awaited_once_with(
        "GET", "/status/42", failure_code=MessageCode.STATUS_CHECK_FAILED
    )


@pytest.mark.asyncio
async def test_status_requires_id(fashn_client):
    with patch.object(FashnClient, "_request", AsyncMock()) as request:
        with pytest.raises(InvalidInputError) as exc_info:
            await fashn_client.status("")

    assert exc_info.value.message == "ID is required"
    request.assert_not_awaited()


@pytest.mark.asyncio
async def test_status_rejects_malformed_payload(fashn_client):
    with patch.object(
        FashnClient, "_request", AsyncMock(return_value=(200, {"unexpected": True}))
    ):
        with pytest.raises(ProviderError) as exc_info:
            await fashn_client.status("42")

    assert exc_info.value.message_code == MessageCode.STATUS_CHECK_FAILED


def test_client_strips_trailing_slash():
    assert FashnClient(api_key="k", base_url="https://api.fashn.test/v1/").url == (
        "https://api.fashn.test/v1"
    )


@pytest.mark.asyncio
async def test_sync_backend_returns_inline_output(fashn_client, result_poller):
    backend = SubmitAndWaitBackend(fashn_client, result_poller)
    with (
        patch.object(
            FashnClient,
            "run",
            AsyncMock(return_value={"output": ["https://cdn/result123.png"]}),
        ) as run,
        patch.object(ResultPoller, "poll", AsyncMock()) as poll,
    ):
        submission = await backend.submit(AVATAR)

    assert submission.output_url == "https://cdn/result123.png"
    assert submission.prediction_id is None
    poll.assert_not_awaited()

    model_name, inputs = run.await_args.args
    assert model_name == "face-to-model"
    assert inputs["face_image"] == AVATAR
    assert MIN_SEED <= inputs["seed"] <= MAX_SEED


@pytest.mark.asyncio
async def test_sync_backend_polls_when_only_an_id_comes_back(fashn_client, result_poller):
    backend = SubmitAndWaitBackend(fashn_client, result_poller)
    with (
        patch.object(FashnClient, "run", AsyncMock(return_value={"id": "pred-9"})),
        patch.object(
            ResultPoller, "poll", AsyncMock(return_value="https://cdn/late.png")
        ) as poll,
    ):
        submission = await backend.submit(AVATAR)

    assert submission.output_url == "https://cdn/late.png"
    poll.assert_awaited_once_with("pred-9")


@pytest.mark.asyncio
async def test_async_backend_returns_prediction_id(fashn_client):
    backend = SubmitAndTrackBackend(fashn_client)
    with patch.object(FashnClient, "run", AsyncMock(return_value={"id": 42})):
        submission = await backend.submit(AVATAR)

    assert submission.prediction_id == "42"
    assert submission.output_url is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "backend_cls", [SubmitAndWaitBackend, SubmitAndTrackBackend]
)
async def test_backends_fail_without_id_or_output(fashn_client, result_poller, backend_cls):
    backend = (
        backend_cls(fashn_client, result_poller)
        if backend_cls is SubmitAndWaitBackend
        else backend_cls(fashn_client)
    )
    with patch.object(FashnClient, "run", AsyncMock(return_value={})):
        with pytest.raises(ProviderError) as exc_info:
            await backend.submit(AVATAR)

    assert exc_info.value.message_code == MessageCode.TRANSFORM_START_FAILED


@pytest.mark.asyncio
async def test_backend_requires_image_url(fashn_client):
    backend = SubmitAndTrackBackend(fashn_client)
    with patch.object(FashnClient, "run", AsyncMock()) as run:
        with pytest.raises(InvalidInputError) as exc_info:
            await backend.submit("")

    assert exc_info.value.message == "image_url is required"
    run.assert_not_awaited()


@pytest.mark.parametrize(
    "mode, expected",
    [
        ("sync", SubmitAndWaitBackend),
        ("async", SubmitAndTrackBackend),
        (TransformMode.ASYNC, SubmitAndTrackBackend),
        (None, SubmitAndWaitBackend),
    ],
)
def test_create_backend_selects_by_mode(fashn_client, result_poller, mode, expected):
    assert isinstance(create_backend(fashn_client, result_poller, mode), expected)


def test_prediction_job_keeps_unknown_fields():
    job = PredictionJob.model_validate({"id": "1", "status": "processing", "eta": 3})

    assert not job.is_terminal
    assert job.model_dump(exclude_none=True) == {"id": "1", "status": "processing", "eta": 3}
