"""Practice service - Business logic for practice records"""

import logging
from typing import Callable, Optional

from ...errors import ConditionFailed, DuplicateKey, MissingParameter, NotFound
from ...identity import Identity
from ...shared.validators import generate_id, utc_now_iso
from .repository import PracticeRepository
from .schemas import PracticeCreate

logger = logging.getLogger(__name__)

KEY_FIELDS = ("pk", "sk")


def strip_keys(item: dict) -> dict:
    return {k: v for k, v in item.items() if k not in KEY_FIELDS}


class PracticeService:
    """Service layer for practice operations"""

    def __init__(
        self,
        practices: PracticeRepository,
        id_factory: Callable[[str], str] = generate_id,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self.practices = practices
        self.id_factory = id_factory
        self.clock = clock

    def create_practice(self, data: PracticeCreate, identity: Identity) -> dict:
        """Create a practice owned by the caller's tenant"""
        now = self.clock()
        practice = {
            **data.model_dump(mode="json", exclude_none=True),
            "practiceId": self.id_factory("prac"),
            "tenantId": identity.tenant_id,
            "createdAt": now,
            "updatedAt": now,
        }

        try:
            self.practices.create_practice(practice)
        except ConditionFailed as e:
            logger.error(f"❌ Practice ID collision on {practice['practiceId']}")
            raise DuplicateKey("Duplicate practice") from e

        logger.info(f"✅ Practice created: {practice['practiceId']} tenant={identity.tenant_id}")
        return practice

    def get_practice(self, practice_id: Optional[str]) -> dict:
        """Get a practice by ID; public read path"""
        if not practice_id or not practice_id.strip():
            raise MissingParameter("Practice ID is required")

        practice = self.practices.get_practice(practice_id)
        if not practice:
            logger.warning(f"⚠️ Practice not found: {practice_id}")
            raise NotFound("Practice not found")

        logger.info(f"📖 Practice retrieved: {practice_id}")
        return strip_keys(practice)
