"""Credential sources used to build adapters on behalf of a user."""

import os
from typing import Dict, Mapping, Optional, Protocol, Tuple, Union, runtime_checkable

from dotenv import load_dotenv
from pydantic import BaseModel

from ..models.generation import ProviderType


class ProviderCredentials(BaseModel):
    """Decrypted API key and optional endpoint for one provider."""
    api_key: str
    base_url: Optional[str] = None


@runtime_checkable
class KeyStore(Protocol):
    """
    Supplies credentials per ``(user_id, provider_type)``.

    Returns None when the user has no active key for the provider. Storage,
    encryption and access control belong to the implementation.
    """

    async def get_credentials(
        self, user_id: str, provider_type: ProviderType
    ) -> Optional[ProviderCredentials]:
        ...


class StaticKeyStore:
    """In-memory key store, mainly for tests and single-tenant setups."""

    def __init__(
        self,
        credentials: Optional[Mapping[Tuple[str, Union[ProviderType, str]], Union[ProviderCredentials, Mapping]]] = None,
    ):
        self._credentials: Dict[Tuple[str, ProviderType], ProviderCredentials] = {}
        for (user_id, provider_type), value in (credentials or {}).items():
            self.set(user_id, provider_type, value)

    def set(
        self,
        user_id: str,
        provider_type: Union[ProviderType, str],
        credentials: Union[ProviderCredentials, Mapping],
    ) -> None:
        if not isinstance(credentials, ProviderCredentials):
            credentials = ProviderCredentials.model_validate(dict(credentials))
        self._credentials[(user_id, ProviderType(provider_type))] = credentials

    def remove(self, user_id: str, provider_type: Union[ProviderType, str]) -> None:
        self._credentials.pop((user_id, ProviderType(provider_type)), None)

    async def get_credentials(
        self, user_id: str, provider_type: ProviderType
    ) -> Optional[ProviderCredentials]:
        return self._credentials.get((user_id, ProviderType(provider_type)))


class EnvKeyStore:
    """
    Reads ``<PROVIDER>_API_KEY`` and ``<PROVIDER>_BASE_URL`` from the
    environment (after loading a ``.env`` file). The user id is ignored.
    """

    def __init__(self, dotenv: bool = True):
        if dotenv:
            load_dotenv()

    async def get_credentials(
        self, user_id: str, provider_type: ProviderType
    ) -> Optional[ProviderCredentials]:
        prefix = ProviderType(provider_type).value.upper()
        api_key = os.getenv(f"{prefix}_API_KEY")
        if not api_key:
            return None
        return ProviderCredentials(api_key=api_key, base_url=os.getenv(f"{prefix}_BASE_URL") or None)
