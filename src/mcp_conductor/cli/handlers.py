"""
CLI command handlers for MCP Conductor.

Each ``_handle_*`` function returns an exit code. Dispatches that end in a
fallback still exit 0; only startup failures exit non-zero.
"""

import asyncio
import json
import sys
from typing import Any, Dict

from ..config import load_config, ConfigurationError
from ..core.dispatcher import RequestDispatcher
from ..core.types import DispatchResult
from ..utils import setup_logging, get_logger, log_startup, log_config_info, log_shutdown
from ..utils.error_handling import ValidationError


def handle_cli_command(args) -> int:
    """
    Handle CLI commands based on parsed arguments.

    Returns:
        int: Exit code (0 for success, non-zero for error)
    """
    try:
        # Load configuration (use built-in defaults if no config specified)
        config = load_config(args.config)
        setup_logging(config, verbose=args.verbose)
        log_startup(args.config)
        log_config_info(config)

        dispatcher = RequestDispatcher.from_config(config)

        if args.list_providers:
            return _handle_list_providers(dispatcher, args)
        elif args.list_commands:
            return _handle_list_commands(dispatcher, args)
        elif args.stats:
            return _handle_stats(dispatcher, args)
        elif args.feedback:
            return _handle_feedback(dispatcher, args)
        elif args.text is not None:
            return _handle_request(dispatcher, args)
        else:
            return _handle_status(dispatcher, args)

    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        get_logger(__name__).debug("Unexpected CLI failure", exc_info=True)
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        return 1
    finally:
        log_shutdown()


def _print_json(data: Dict[str, Any]) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _request_context(args) -> Dict[str, Any]:
    context: Dict[str, Any] = {}
    if args.files:
        context["files"] = list(args.files)
    if args.project_type:
        context["projectType"] = args.project_type
    return context


def _handle_request(dispatcher: RequestDispatcher, args) -> int:
    """Dispatch one request and print the activation config."""
    result = dispatcher.process_request_sync(args.text, args.session, _request_context(args))

    if args.json:
        _print_json(result.to_dict())
        return 0

    if not isinstance(result, DispatchResult):
        print(f"❓ {result.message}")
        print(f"   Available commands: {', '.join(result.available_commands)}")
        print(f"   Run {result.help_command} for details")
        return 0

    config = result.config
    marker = "⚠️ " if result.fallback else "🎯"
    print(f"{marker} {config.user_friendly_command} ({config.mode.value})")
    print(f"   Providers: {', '.join(config.providers)}")
    print(f"   Flags:     {' '.join(config.flags)}")
    print(f"   Estimate:  {config.performance.estimated_time} / {config.performance.resource_usage} resources")
    print(f"   {config.rationale}")
    if result.error:
        print(f"   Fallback reason: {result.error}")

    recommendations = result.recommendations
    if recommendations.alternatives:
        print("\n💡 Alternatives:")
        for alternative in recommendations.alternatives:
            print(f"  {alternative.command:<8} {alternative.reason}")
    for tip in recommendations.tips + recommendations.session:
        print(f"  • {tip}")

    print(f"\n🆔 request {result.request_id}  session {result.session_id}")
    return 0


def _handle_list_providers(dispatcher: RequestDispatcher, args) -> int:
    """List the capability provider catalog."""
    defaults = set(dispatcher.registry.always_defaults)

    if args.json:
        _print_json({
            "providers": [
                {
                    "id": provider.id,
                    "name": provider.name,
                    "flags": list(provider.activation_flags),
                    "priority": provider.priority.value,
                    "load_time": provider.load_time.value,
                    "default": provider.id in defaults,
                }
                for provider in dispatcher.registry.providers
            ]
        })
        return 0

    print("📋 Capability Providers:")
    for provider in dispatcher.registry.providers:
        default = " (default)" if provider.id in defaults else ""
        print(f"  {provider.id:<12} {provider.canonical_flag:<8} {provider.name}{default}")
        print(f"    {provider.description}")
    return 0


def _handle_list_commands(dispatcher: RequestDispatcher, args) -> int:
    """List super-commands, aliases and natural-language examples."""
    help_data = dispatcher.get_help()
    if args.json:
        _print_json(help_data)
    else:
        print(help_data["content"])
    return 0


def _handle_stats(dispatcher: RequestDispatcher, args) -> int:
    """Show usage statistics from stored history."""
    asyncio.run(dispatcher.initialize())
    stats = dispatcher.get_statistics()

    if args.json:
        _print_json(stats)
        return 0

    history = stats["history"]
    print("📊 Usage Statistics:")
    print(f"  Total usages:  {history['total_usages']}")
    print(f"  Success rate:  {history['success_rate']:.0%}")
    print(f"  Feedback:      {history['feedback_count']} (avg {history['average_rating']:.1f})")
    if history["provider_popularity"]:
        print("  Provider popularity:")
        for provider_id, count in history["provider_popularity"].items():
            print(f"    {provider_id:<12} {count}")
    return 0


def _handle_feedback(dispatcher: RequestDispatcher, args) -> int:
    """Attach a rating to an earlier request."""
    request_id, rating_text = args.feedback
    try:
        rating = int(rating_text)
    except ValueError:
        print(f"❌ Rating must be an integer, got {rating_text!r}", file=sys.stderr)
        return 1

    async def run():
        await dispatcher.initialize()
        entry = await dispatcher.collect_feedback(request_id, rating)
        await dispatcher.shutdown()
        return entry

    try:
        entry = asyncio.run(run())
    except ValidationError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    if entry is None:
        print(f"❓ No history entry for {request_id}")
    else:
        status = "success" if entry.success else "failure"
        print(f"✅ Feedback recorded for {request_id} ({rating}/5, counted as {status})")
    return 0


def _handle_status(dispatcher: RequestDispatcher, args) -> int:
    """Show dispatcher status when no request text is given."""
    asyncio.run(dispatcher.initialize())
    status = dispatcher.get_status()

    if args.json:
        _print_json(status)
        return 0

    print("🎼 MCP Conductor")
    print(f"  Providers:         {', '.join(status['providers'])}")
    print(f"  Default providers: {', '.join(status['default_providers'])}")
    print(f"  Commands:          {', '.join(status['commands'])}")
    print(f"  History entries:   {status['history_entries']}")
    print("\nPass request text, a /command or --list-commands to get started.")
    return 0
