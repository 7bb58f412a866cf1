"""Code upgrade mechanism.

The service cannot replace its own code at runtime; the deployer records the
requested code hash so operators (and tests) can see which build should run.
"""

import threading
from typing import List, Optional

from pydantic import BaseModel, Field

from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.utils.address import normalize_code_hash

logger = get_logger(__name__)


class CodeDeployment(BaseModel):
    code_hash: str = Field(..., description="64 hex chars")
    deployed_at_millis: int


class CodeDeployer:
    """Keeps the current code hash and the history of upgrades."""

    def __init__(self, clock):
        self._clock = clock
        self._lock = threading.RLock()
        self._history: List[CodeDeployment] = []

    @property
    def current_code_hash(self) -> Optional[str]:
        with self._lock:
            return self._history[-1].code_hash if self._history else None

    @property
    def history(self) -> List[CodeDeployment]:
        with self._lock:
            return list(self._history)

    def update_current_code(self, code_hash: str) -> CodeDeployment:
        """Record a new code hash as current.

        Raises:
            ValueError: If code_hash is not 32 bytes of hex
        """
        normalized = normalize_code_hash(code_hash)
        deployment = CodeDeployment(code_hash=normalized, deployed_at_millis=self._clock())
        with self._lock:
            previous = self.current_code_hash
            self._history.append(deployment)

        logger.info("contract_code_updated", code_hash=normalized, previous_code_hash=previous)
        return deployment

    def clear(self) -> None:
        with self._lock:
            self._history.clear()
