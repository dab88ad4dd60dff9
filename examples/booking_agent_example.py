"""Interactive text version of the phone booking assistant.

Demonstrates:
- Building the default tool registry from settings
- Seeding a session with the system prompt and greeting
- Printing emission units as the orchestrator flushes them

Usage:
    OPENAI_API_KEY=... BOOKING_WEBHOOK_URL=https://... \\
        uv run examples/booking_agent_example.py --caller +61400000000 --trace
"""

import argparse
import asyncio
import uuid

from callflow.config import Settings, configure_logging
from callflow.events import CallbackSink, EmissionUnit, OrderedSink
from callflow.functions import default_registry
from callflow.orchestrator import Orchestrator
from callflow.prompts import GREETING, SYSTEM_PROMPT
from callflow.provider import OpenAICompatibleProvider, OpenAIProvider
from callflow.session import Session


def setup_tracing(service_name: str):
    from opentelemetry import trace
    from opentelemetry.sdk.resources import SERVICE_NAME, Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import (
        SimpleSpanProcessor, ConsoleSpanExporter,
    )
    from callflow.instrumentation import instrument

    provider = TracerProvider(
        resource=Resource({SERVICE_NAME: service_name})
    )
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
    instrument()


def speak(unit: EmissionUnit) -> None:
    label = "say" if unit.index is None else f"{unit.index:>3}"
    print(f"  [{label}] {unit.text.strip()}")


async def main():
    parser = argparse.ArgumentParser(description="Booking assistant")
    parser.add_argument("--caller", default=None, help="Caller phone number")
    parser.add_argument("--url", default=None, help="OpenAI-compatible base URL")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--trace", action="store_true")
    args = parser.parse_args()

    settings = Settings.from_env()
    configure_logging(settings.log_level, args.log_file)
    if args.trace:
        setup_tracing("booking-assistant")

    if args.url:
        provider = OpenAICompatibleProvider(base_url=args.url)
    else:
        provider = OpenAIProvider(api_key=settings.openai_api_key)

    session = Session.seeded(SYSTEM_PROMPT, GREETING)
    orchestrator = Orchestrator.from_settings(
        settings, provider, default_registry(settings), session,
        OrderedSink(CallbackSink(speak)),
    )
    if args.caller:
        orchestrator.set_caller_number(args.caller)
    orchestrator.set_call_sid(f"CA{uuid.uuid4().hex}")

    print(f"Assistant: {GREETING}\n")
    interaction_count = 0
    while True:
        try:
            user_input = input("You: ")
        except (KeyboardInterrupt, EOFError):
            print("\nGoodbye!")
            break
        interaction_count += 1
        await orchestrator.respond_safely(user_input, interaction_count)
        print()


if __name__ == "__main__":
    asyncio.run(main())
