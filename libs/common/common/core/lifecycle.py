from abc import ABC, abstractmethod
from datetime import datetime

from common.utils.utils import get_logger, get_now

logger = get_logger()


class Lifecycle(ABC):
    """Process-wide component started once by the application lifespan.

    ``start`` and ``stop`` are idempotent; a component is running only once ``_start`` succeeded.
    """

    _started_at: datetime | None

    def __init__(self) -> None:
        self._started_at = None

    @property
    def is_running(self) -> bool:
        return self._started_at is not None

    async def start(self) -> None:
        if self.is_running:
            return

        logger.info("Starting component", component=self._name_for_log)
        try:
            await self._start()
        except Exception:
            logger.exception("Component failed to start", component=self._name_for_log)
            raise
        self._started_at = get_now()
        logger.info("Component started", component=self._name_for_log)

    @abstractmethod
    async def _start(self) -> None:
        pass

    async def stop(self) -> None:
        if not self.is_running:
            return

        started_at = self._started_at
        self._started_at = None
        try:
            await self._stop()
        except Exception:
            logger.exception("Component failed to stop", component=self._name_for_log)
            raise
        logger.info("Component stopped", component=self._name_for_log, started_at=started_at)

    async def _stop(self) -> None:
        return None

    @property
    def _name_for_log(self) -> str:
        return self.__class__.__name__
