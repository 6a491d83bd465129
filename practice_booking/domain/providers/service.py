"""Provider service - Business logic for provider records"""

import logging
from typing import Callable, Optional

from ...errors import ConditionFailed, DuplicateKey, MissingParameter, NotFound
from ...identity import Identity
from ...shared.validators import generate_id, utc_now_iso
from ..practices.repository import PracticeRepository
from ..practices.service import strip_keys
from .repository import ProviderRepository
from .schemas import ProviderCreate

logger = logging.getLogger(__name__)


class ProviderService:
    """Service layer for provider operations"""

    def __init__(
        self,
        providers: ProviderRepository,
        practices: PracticeRepository,
        id_factory: Callable[[str], str] = generate_id,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self.providers = providers
        self.practices = practices
        self.id_factory = id_factory
        self.clock = clock

    def create_provider(self, data: ProviderCreate, identity: Identity) -> dict:
        """Add a provider to a practice owned by the caller's tenant"""
        practice = self.practices.get_practice(data.practiceId)
        if not practice:
            logger.warning(f"⚠️ Provider rejected, practice not found: {data.practiceId}")
            raise NotFound("Practice not found")
        identity.require_tenant(practice["tenantId"])

        now = self.clock()
        provider = {
            **data.model_dump(mode="json", exclude_none=True),
            "providerId": self.id_factory("prov"),
            "tenantId": identity.tenant_id,
            "createdAt": now,
            "updatedAt": now,
        }

        try:
            self.providers.create_provider(provider)
        except ConditionFailed as e:
            logger.error(f"❌ Provider ID collision on {provider['providerId']}")
            raise DuplicateKey("Duplicate provider") from e

        logger.info(
            f"✅ Provider created: {provider['providerId']} practice={data.practiceId} "
            f"tenant={identity.tenant_id}"
        )
        return provider

    def get_provider(self, provider_id: Optional[str]) -> dict:
        """Get a provider by ID; public read path"""
        if not provider_id or not provider_id.strip():
            raise MissingParameter("Provider ID is required")

        provider = self.providers.get_provider(provider_id)
        if not provider:
            logger.warning(f"⚠️ Provider not found: {provider_id}")
            raise NotFound("Provider not found")

        logger.info(f"📖 Provider retrieved: {provider_id}")
        return strip_keys(provider)

    def list_providers(self, practice_id: Optional[str] = None) -> dict:
        providers = sorted(
            self.providers.list_providers(practice_id),
            key=lambda p: (p.get("name", ""), p.get("providerId", "")),
        )
        logger.info(f"👥 Found {len(providers)} providers (practice={practice_id})")
        return {
            "providers": [strip_keys(p) for p in providers],
            "count": len(providers),
            "practiceId": practice_id,
        }
