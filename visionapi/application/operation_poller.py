"""
Long-poll controller for two-phase "submit then poll" remote operations
"""
import logging
import threading
import time
from typing import Callable, Optional, Set

from visionapi.domain.errors import (
    OperationCancelled,
    OperationInProgress,
    RemoteOperationFailed,
    ServiceRequestError,
    SubmissionError,
)
from visionapi.domain.interfaces import VisionClientInterface
from visionapi.domain.models import (
    OperationStatus,
    PollState,
    TextOperationResult,
    TextRecognitionMode,
)

logger = logging.getLogger(__name__)


class OperationPoller:
    """Submits a text recognition job and polls it until a terminal status.

    States run Idle -> Submitted -> Polling -> Completed | Failed | TimedOut.
    When the attempt budget runs out the last non-terminal result is handed
    back as-is; callers must check its status.
    """

    def __init__(
        self,
        client: VisionClientInterface,
        max_attempts: int = 10,
        interval: float = 1.0,
        operation_id_length: int = 36,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if operation_id_length < 1:
            raise ValueError("operation_id_length must be at least 1")
        self.client = client
        self.max_attempts = max_attempts
        self.interval = interval
        self.operation_id_length = operation_id_length
        self.sleep = sleep
        self.state = PollState.IDLE
        self.attempts = 0
        self._issued: Set[str] = set()
        self._lock = threading.Lock()

    def extract_operation_id(self, operation_location: Optional[str]) -> str:
        """Return the fixed-width tail of an Operation-Location value"""
        location = (operation_location or "").strip()
        if len(location) < self.operation_id_length:
            raise SubmissionError(
                f"No operation handle in response (location={operation_location!r})"
            )
        return location[-self.operation_id_length:]

    def submit(
        self,
        image_data: bytes,
        mode: TextRecognitionMode = TextRecognitionMode.PRINTED,
    ) -> str:
        """Start the remote job and return its operation handle"""
        try:
            response = self.client.submit_text_recognition(image_data, mode)
        except ServiceRequestError as e:
            self.state = PollState.FAILED
            raise SubmissionError(str(e)) from e

        try:
            handle = self.extract_operation_id(response.operation_location if response else None)
            if handle in self._issued:
                raise SubmissionError(f"Service reused operation handle {handle}")
        except SubmissionError:
            self.state = PollState.FAILED
            raise

        self._issued.add(handle)
        self.state = PollState.SUBMITTED
        self.attempts = 0
        logger.info(f"Submitted text recognition ({mode.value}), operation {handle}")
        return handle

    def poll_until_terminal(
        self,
        handle: str,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> TextOperationResult:
        """Query the job until it succeeds, fails or the budget is spent"""
        budget = self.max_attempts if max_attempts is None else max_attempts
        delay = self.interval if interval is None else interval
        if budget < 1:
            raise ValueError("max_attempts must be at least 1")

        if not self._lock.acquire(blocking=False):
            raise OperationInProgress("A poll loop is already running")
        try:
            self.state = PollState.POLLING
            self.attempts = 0
            result = None

            while True:
                if cancel_event is not None and cancel_event.is_set():
                    self.state = PollState.FAILED
                    logger.info(f"Operation {handle} cancelled after {self.attempts} queries")
                    raise OperationCancelled(f"Operation {handle} was cancelled")

                try:
                    result = self.client.get_operation_status(handle)
                except Exception:
                    self.state = PollState.FAILED
                    raise
                self.attempts += 1

                if result.status.is_terminal:
                    break
                if self.attempts >= budget:
                    break
                self.sleep(delay)

            if result.status == OperationStatus.SUCCEEDED:
                self.state = PollState.COMPLETED
                logger.info(f"Operation {handle} succeeded after {self.attempts} queries")
                return result

            if result.status == OperationStatus.FAILED:
                self.state = PollState.FAILED
                logger.warning(f"Operation {handle} failed: {result.failure_reason}")
                raise RemoteOperationFailed(result.failure_reason)

            self.state = PollState.TIMED_OUT
            logger.warning(
                f"Operation {handle} still {result.status.value} after {self.attempts} queries"
            )
            return result
        finally:
            self._lock.release()

    def run(
        self,
        image_data: bytes,
        mode: TextRecognitionMode = TextRecognitionMode.PRINTED,
        cancel_event: Optional[threading.Event] = None,
    ) -> TextOperationResult:
        """Submit and poll in one call"""
        handle = self.submit(image_data, mode)
        return self.poll_until_terminal(handle, cancel_event=cancel_event)
