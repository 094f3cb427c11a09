"""FastAPI HTTP endpoints for the AI gateway.

Mount ``router`` on an application. The factory used by the endpoints comes
from the ``get_factory`` dependency, which applications and tests can
override through ``app.dependency_overrides``.
"""

import json
import logging
from typing import Any, AsyncIterator, Dict, Optional

try:
    from fastapi import APIRouter, Depends, HTTPException
    from fastapi.responses import StreamingResponse
except ImportError:
    raise ImportError(
        "FastAPI is required for HTTP endpoints. "
        "Please install with: pip install ai-gateway"
    )
from pydantic import BaseModel

from ..factory.provider_factory import ProviderFactory, get_default_factory
from ..models.generation import CompletionOptions, ProviderType
from ..providers.base import ProviderAdapter
from ..providers.errors import (
    ContextLengthExceededError,
    CredentialsNotFoundError,
    ProviderError,
    ProviderHTTPError,
    ProviderTimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class ProviderRequest(BaseModel):
    """Identifies the adapter: an explicit key or a user whose key is stored."""
    provider: ProviderType
    api_key: Optional[str] = None
    user_id: Optional[str] = None
    base_url: Optional[str] = None


class CompletionRequest(ProviderRequest):
    options: CompletionOptions


class ValidateKeyRequest(BaseModel):
    api_key: str
    base_url: Optional[str] = None


def get_factory() -> ProviderFactory:
    return get_default_factory()


def error_status(error: ProviderError) -> int:
    if isinstance(error, (ValidationError, ContextLengthExceededError)):
        return 400
    if isinstance(error, CredentialsNotFoundError):
        return 404
    if isinstance(error, ProviderHTTPError) and error.status_code:
        return error.status_code
    if isinstance(error, ProviderTimeoutError):
        return 504
    return 502


def to_http_error(error: ProviderError) -> HTTPException:
    return HTTPException(status_code=error_status(error), detail=error.message)


def _parse_provider(provider_type: str) -> ProviderType:
    try:
        return ProviderType(provider_type)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown provider type: {provider_type}") from None


async def resolve_adapter(request: ProviderRequest, factory: ProviderFactory) -> ProviderAdapter:
    if request.api_key:
        config = factory.get_default_config(request.provider)
        config["api_key"] = request.api_key
        if request.base_url:
            config["base_url"] = request.base_url
        return factory.create(request.provider, config)
    if request.user_id:
        return await factory.create_for_user(request.user_id, request.provider)
    raise HTTPException(status_code=400, detail="Either api_key or user_id is required")


@router.get("/providers")
async def list_providers(factory: ProviderFactory = Depends(get_factory)):
    """All provider types with their descriptive info and default config."""
    return {
        "providers": [
            {
                **factory.get_provider_info(provider_type).model_dump(mode="json"),
                "default_config": factory.get_default_config(provider_type),
            }
            for provider_type in factory.get_available_providers()
        ]
    }


@router.get("/providers/{provider_type}")
async def provider_info(provider_type: str, factory: ProviderFactory = Depends(get_factory)):
    parsed = _parse_provider(provider_type)
    return {
        **factory.get_provider_info(parsed).model_dump(mode="json"),
        "default_config": factory.get_default_config(parsed),
    }


@router.post("/providers/{provider_type}/validate")
async def validate_key(
    provider_type: str,
    body: ValidateKeyRequest,
    factory: ProviderFactory = Depends(get_factory),
):
    parsed = _parse_provider(provider_type)
    config = factory.get_default_config(parsed)
    config["api_key"] = body.api_key
    if body.base_url:
        config["base_url"] = body.base_url
    return {"valid": await factory.validate_provider_config(parsed, config)}


@router.post("/complete")
async def complete(body: CompletionRequest, factory: ProviderFactory = Depends(get_factory)) -> Dict[str, Any]:
    """Run a completion and return the normalized response with its cost."""
    try:
        adapter = await resolve_adapter(body, factory)
        response = await adapter.complete(body.options)
    except ProviderError as e:
        raise to_http_error(e)

    return {
        "response": response.model_dump(mode="json"),
        "cost": adapter.calculate_cost(response.usage, response.model),
    }


@router.post("/stream")
async def stream(body: CompletionRequest, factory: ProviderFactory = Depends(get_factory)):
    """
    Stream a completion as server-sent events.

    The first chunk is pulled before the response starts so that request
    errors still map to an HTTP status. Errors after that are sent as a final
    ``data: {"error": ...}`` event.
    """
    try:
        adapter = await resolve_adapter(body, factory)
        chunks = adapter.stream_complete(body.options)
        first = await chunks.__anext__()
    except StopAsyncIteration:
        first = None
    except ProviderError as e:
        raise to_http_error(e)

    async def event_stream() -> AsyncIterator[str]:
        try:
            if first is not None:
                yield f"data: {first.model_dump_json(exclude_none=True)}\n\n"
                async for chunk in chunks:
                    yield f"data: {chunk.model_dump_json(exclude_none=True)}\n\n"
        except ProviderError as e:
            logger.error(f"Stream failed after it started: {e}")
            yield f"data: {json.dumps({'error': e.message, 'status_code': e.status_code})}\n\n"
        yield "data: [DONE]\n\n"

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
