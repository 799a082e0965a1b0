"""End-to-end profile transformation flow for one user session."""

from typing import Awaitable, Callable

from src.api.core.exceptions.base import (
    ProfileTransformException,
    ProviderError,
    VerificationFailedError,
)
from src.api.core.messages import (
    FALLBACK_ERROR_MESSAGE,
    MessageCode,
    get_default_message,
)
from src.modules.avatar.resolver import AvatarResolver, normalize_handle
from src.modules.transform.poller import ResultPoller
from src.modules.transform.service import TransformService
from src.modules.transform.state import (
    InvalidTransitionError,
    TransformationState,
    TransformationStatus,
)
from src.utils.logger import get_logger

logger = get_logger(__name__)

TokenSource = Callable[[], Awaitable[str | None]]
StateObserver = Callable[[TransformationState], None]


def single_use_token(token: str | None) -> TokenSource:
    """Token source that hands out one token, then nothing."""
    remaining = [token] if token else []

    async def next_token() -> str | None:
        return remaining.pop() if remaining else None

    return next_token


class TransformationFlow:
    """Drive a handle through resolve, gate, submit and (maybe) poll.

    The flow owns its state machine; every state it passes through is kept in
    ``history`` and pushed to the observer. Failures of any stage end in the
    ``error`` state with a single display message.
    """

    def __init__(
        self,
        resolver: AvatarResolver,
        transform_service: TransformService,
        poller: ResultPoller,
        token_source: TokenSource,
        client_ip: str | None = None,
        observer: StateObserver | None = None,
    ):
        self.resolver = resolver
        self.transform_service = transform_service
        self.poller = poller
        self.token_source = token_source
        self.client_ip = client_ip
        self.observer = observer
        self.handle: str | None = None
        self.state = TransformationState()
        self.history: list[TransformationState] = [self.state]

    def _set(self, state: TransformationState) -> TransformationState:
        self.state = state
        self.history.append(state)
        if self.observer:
            self.observer(state)
        return state

    def reset(self) -> TransformationState:
        self.handle = None
        if self.state.status == TransformationStatus.IDLE:
            return self.state
        return self._set(self.state.reset())

    async def submit(self, handle: str | None) -> TransformationState:
        """Run one attempt and return the terminal state it ended in."""
        if self.state.is_loading:
            raise InvalidTransitionError(
                self.state.status, TransformationStatus.FETCHING_PROFILE
            )
        if self.state.is_terminal:
            self._set(self.state.reset())

        self.handle = normalize_handle(handle)
        if not self.handle:
            return self._set(
                self.state.failed(get_default_message(MessageCode.HANDLE_REQUIRED))
            )

        try:
            # A fresh token per attempt; it is dropped when the attempt ends
            token = await self.token_source()
            if not token:
                raise VerificationFailedError()

            self._set(self.state.fetching_profile())
            avatar = await self.resolver.resolve(self.handle)

            self._set(self.state.transforming(avatar.image_url))
            result = await self.transform_service.transform_image(
                avatar.image_url, token, client_ip=self.client_ip
            )

            if result.id:
                self._set(self.state.polling())
                image = await self.poller.poll(result.id)
            else:
                image = result.image

            if not image:
                raise ProviderError()

            state = self._set(self.state.complete(image))
            logger.info("Transformation flow complete", handle=self.handle)
            return state

        except ProfileTransformException as e:
            logger.info(
                "Transformation flow failed",
                handle=self.handle,
                stage=self.state.status.value,
                message_code=e.message_code.value,
            )
            return self._set(self.state.failed(e.message))
        except InvalidTransitionError:
            raise
        except Exception as e:
            logger.exception(
                f"Unexpected error in transformation flow: {e}",
                handle=self.handle,
                stage=self.state.status.value,
            )
            return self._set(self.state.failed(FALLBACK_ERROR_MESSAGE))
