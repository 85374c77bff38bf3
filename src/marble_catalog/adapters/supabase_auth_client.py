"""Supabase auth-backed token verification."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from marble_catalog.services.auth import AuthClient

logger = logging.getLogger(__name__)


@dataclass
class SupabaseAuthClient(AuthClient):
    """Verifies access tokens against Supabase auth."""

    client: Client

    def get_user_id(self, access_token: str) -> UUID | None:
        """Return the user id for a valid access token."""
        try:
            response = self.client.auth.get_user(access_token)
        except Exception:
            logger.warning("Rejected access token", exc_info=True)
            return None
        if response is None or response.user is None:
            return None
        return UUID(str(response.user.id))
