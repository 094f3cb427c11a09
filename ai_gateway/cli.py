"""CLI entry point for the AI gateway."""

import argparse
import asyncio
import logging
from typing import List, Optional

from .config.models import resolve_model_alias
from .config.settings import GatewaySettings
from .factory.key_store import EnvKeyStore
from .factory.provider_factory import ProviderFactory
from .models.conversation_types import Message
from .models.generation import CompletionOptions, ProviderType
from .providers.base import ProviderAdapter
from .providers.errors import ProviderError

# EnvKeyStore ignores the user id; the CLI acts as a single local user
CLI_USER_ID = "cli"


def build_factory() -> ProviderFactory:
    return ProviderFactory(key_store=EnvKeyStore(), settings=GatewaySettings.from_env())


async def resolve_provider(factory: ProviderFactory, provider: str, api_key: Optional[str],
                           base_url: Optional[str] = None) -> ProviderAdapter:
    if api_key:
        config = factory.get_default_config(provider)
        config["api_key"] = api_key
        if base_url:
            config["base_url"] = base_url
        return factory.create(provider, config)
    return await factory.create_for_user(CLI_USER_ID, provider)


async def complete_text(factory: ProviderFactory, args: argparse.Namespace) -> int:
    """Run one completion and print the result."""
    model = resolve_model_alias(args.model, args.provider) or args.model
    messages = []
    if args.system:
        messages.append(Message(role="system", content=args.system))
    messages.append(Message(role="user", content=args.prompt))
    options = CompletionOptions(
        model=model,
        messages=messages,
        max_tokens=args.max_tokens,
        temperature=args.temperature,
    )

    try:
        adapter = await resolve_provider(factory, args.provider, args.api_key, args.base_url)
        if args.stream:
            print(f"Streaming response from {model}:\n")
            async for chunk in adapter.stream_complete(options):
                print(chunk.get_text(), end="", flush=True)
            print()
        else:
            result = await adapter.complete(options)
            print(f"Response from {model}:\n")
            print(result.text)
            print(f"\nTokens used: {result.usage.model_dump()}")
            print(f"Cost: ${adapter.calculate_cost(result.usage, result.model):.6f}")
    except ProviderError as e:
        print(f"Error: {e.message}")
        return 1
    return 0


async def list_models(factory: ProviderFactory, args: argparse.Namespace) -> int:
    try:
        adapter = await resolve_provider(factory, args.provider, args.api_key, args.base_url)
        models = await adapter.get_available_models()
    except ProviderError as e:
        print(f"Error: {e.message}")
        return 1

    print(f"Available {args.provider} models:")
    print("-" * 50)
    for model in models:
        print(model)
    return 0


def list_providers(factory: ProviderFactory) -> int:
    print("Providers:")
    print("-" * 50)
    for provider_type in factory.get_available_providers():
        info = factory.get_provider_info(provider_type)
        print(f"{info.type.value}: {info.name}")
        print(f"   {info.description}")
        if info.features:
            print(f"   Features: {', '.join(info.features)}")
        print()
    return 0


def build_parser() -> argparse.ArgumentParser:
    providers = [provider_type.value for provider_type in ProviderType]

    parser = argparse.ArgumentParser(description="AI gateway CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    complete_parser = subparsers.add_parser("complete", help="Run a chat completion")
    complete_parser.add_argument("provider", choices=providers, help="Provider type")
    complete_parser.add_argument("model", help='Model id or tier alias ("fast", "balanced", "powerful")')
    complete_parser.add_argument("prompt", help="User prompt")
    complete_parser.add_argument("--system", help="System prompt")
    complete_parser.add_argument("--max-tokens", type=int, help="Maximum tokens to generate")
    complete_parser.add_argument("--temperature", type=float, help="Sampling temperature")
    complete_parser.add_argument("--stream", action="store_true", help="Stream the response")
    complete_parser.add_argument("--api-key", help="API key (defaults to <PROVIDER>_API_KEY)")
    complete_parser.add_argument("--base-url", help="Override the provider endpoint")

    models_parser = subparsers.add_parser("list-models", help="List models for a provider")
    models_parser.add_argument("provider", choices=providers, help="Provider type")
    models_parser.add_argument("--api-key", help="API key (defaults to <PROVIDER>_API_KEY)")
    models_parser.add_argument("--base-url", help="Override the provider endpoint")

    subparsers.add_parser("providers", help="Describe the supported providers")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    factory = build_factory()
    if args.command == "complete":
        return asyncio.run(complete_text(factory, args))
    if args.command == "list-models":
        return asyncio.run(list_models(factory, args))
    if args.command == "providers":
        return list_providers(factory)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
