from typing import Any

from fastapi import APIRouter, Query

from src.api.core.dependencies import (
    AvatarResolverDep,
    ClientIpDep,
    FashnClientDep,
    ResultPollerDep,
    TransformServiceDep,
)
from src.api.core.exceptions.base import InvalidInputError
from src.api.core.messages import MessageCode
from src.api.transform.schemas import (
    ProfileTransformationRequest,
    RunPredictionRequest,
    TransformImageRequest,
    TransformImageResult,
)
from src.modules.transform.backends import build_inputs
from src.modules.transform.orchestrator import TransformationFlow, single_use_token
from src.modules.transform.state import ExportMetadata, TransformationState

router = APIRouter(prefix="/api", tags=["transform"])


class ProfileTransformationResponse(TransformationState):
    handle: str | None = None
    export: ExportMetadata | None = None


@router.post("/fashn-transform")
async def start_fashn_transform(
    body: RunPredictionRequest,
    client: FashnClientDep,
) -> dict[str, Any]:
    """Start a prediction directly; returns the provider payload ({"id": ...})."""
    if not body.image_url or not body.model_name:
        raise InvalidInputError(message="image_url and model_name are required")

    inputs = build_inputs(body.image_url)
    return await client.run(body.model_name, inputs.model_dump())


@router.get("/fashn-status")
async def get_fashn_status(
    client: FashnClientDep,
    id: str | None = Query(default=None),
) -> dict[str, Any]:
    """Proxy one status query for client-side polling."""
    if not id:
        raise InvalidInputError(MessageCode.PREDICTION_ID_REQUIRED)

    job = await client.status(id)
    return job.model_dump(exclude_none=True)


@router.post(
    "/transform",
    response_model=TransformImageResult,
    response_model_exclude_none=True,
)
async def transform_image(
    body: TransformImageRequest,
    service: TransformServiceDep,
    client_ip: ClientIpDep,
) -> TransformImageResult:
    """Bot-checked, rate-limited transformation of an avatar URL."""
    return await service.transform_image(
        body.image_url, body.turnstile_token, client_ip=client_ip
    )


@router.post(
    "/profile-transformations",
    response_model=ProfileTransformationResponse,
    response_model_exclude_none=True,
)
async def run_profile_transformation(
    body: ProfileTransformationRequest,
    resolver: AvatarResolverDep,
    service: TransformServiceDep,
    poller: ResultPollerDep,
    client_ip: ClientIpDep,
) -> ProfileTransformationResponse:
    """Run the whole handle-to-image flow and report the state it ended in.

    Failures are reported in the body (status "error"), not as HTTP errors.
    """
    flow = TransformationFlow(
        resolver=resolver,
        transform_service=service,
        poller=poller,
        token_source=single_use_token(body.turnstile_token),
        client_ip=client_ip,
    )
    state = await flow.submit(body.handle)

    return ProfileTransformationResponse(
        **state.model_dump(),
        handle=flow.handle or None,
        export=state.export(flow.handle) if flow.handle else None,
    )
