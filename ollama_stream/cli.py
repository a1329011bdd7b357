"""CLI entry point for ollama-stream.

Thin terminal front end over OllamaClient, mostly for poking at a local
server by hand.

Entry point:
    ollama-stream models [--json]
    ollama-stream show <model>
    ollama-stream delete <model>
    ollama-stream generate <model> <prompt> [--system S] [--stream] [--json]
    ollama-stream embed <model> <prompt>
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from ollama_stream.client import OllamaClient
from ollama_stream.errors import OllamaStreamError
from ollama_stream.schema import ErrorRecord, StreamRecord

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────
# ARGUMENT PARSING
# ─────────────────────────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ollama-stream",
        description="Client for a local model server.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--host", default=None, help="Server hostname (default: $OLLAMA_HOSTNAME)")
    parser.add_argument("--port", type=int, default=None, help="Server port (default: $OLLAMA_PORT)")
    parser.add_argument("--timeout", type=float, default=None, help="Timeout per request (seconds)")
    sub = parser.add_subparsers(dest="command")

    # models
    models_p = sub.add_parser("models", help="List local models")
    models_p.add_argument(
        "--json", action="store_true", dest="json_output", help="Raw JSON output"
    )

    # show
    show_p = sub.add_parser("show", help="Show model details")
    show_p.add_argument("model")

    # delete
    delete_p = sub.add_parser("delete", help="Delete a model")
    delete_p.add_argument("model")

    # generate
    gen_p = sub.add_parser("generate", help="Generate a completion")
    gen_p.add_argument("model")
    gen_p.add_argument("prompt")
    gen_p.add_argument("--system", default=None, help="System prompt")
    gen_p.add_argument("--stream", action="store_true", help="Print fragments as they arrive")
    gen_p.add_argument(
        "--json", action="store_true", dest="json_output",
        help="Print every record as JSON instead of the final text",
    )

    # embed
    embed_p = sub.add_parser("embed", help="Embed a prompt")
    embed_p.add_argument("model")
    embed_p.add_argument("prompt")

    return parser


# ─────────────────────────────────────────────────────────────────────
# COMMANDS
# ─────────────────────────────────────────────────────────────────────


async def _cmd_models(client: OllamaClient, json_output: bool = False) -> int:
    """List local models. Returns exit code."""
    result = await client.list_models() or {}

    if json_output:
        json.dump(result, sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        for model in result.get("models", []):
            print(model.get("name", ""))

    return 0


async def _cmd_show(client: OllamaClient, model: str) -> int:
    result = await client.show(model)
    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


async def _cmd_delete(client: OllamaClient, model: str) -> int:
    await client.delete(model)
    print(f"Deleted {model}", file=sys.stderr)
    return 0


async def _cmd_generate(
    client: OllamaClient,
    model: str,
    prompt: str,
    system: Optional[str] = None,
    stream: bool = False,
    json_output: bool = False,
) -> int:
    """Generate a completion. Returns exit code."""
    if stream:
        errors = 0

        def on_record(record: StreamRecord) -> None:
            nonlocal errors
            if isinstance(record, ErrorRecord):
                errors += 1
            if json_output:
                print(record.model_dump_json())
            else:
                sys.stdout.write(record.text)
                sys.stdout.flush()

        await client.generate(model, prompt, system=system, handler=on_record)
        if not json_output:
            sys.stdout.write("\n")
        return 1 if errors else 0

    result = await client.generate(model, prompt, system=system)
    if json_output:
        for record in result.messages:
            print(record.model_dump_json())
    else:
        print(result.final)
    return 1 if result.errors else 0


async def _cmd_embed(client: OllamaClient, model: str, prompt: str) -> int:
    embedding = await client.embed(model, prompt)
    if embedding is None:
        print("Error: no embedding in response", file=sys.stderr)
        return 1
    json.dump(embedding, sys.stdout)
    sys.stdout.write("\n")
    return 0


async def _dispatch(args: argparse.Namespace) -> int:
    client = OllamaClient(hostname=args.host, port=args.port, timeout=args.timeout)
    try:
        if args.command == "models":
            return await _cmd_models(client, json_output=args.json_output)
        if args.command == "show":
            return await _cmd_show(client, args.model)
        if args.command == "delete":
            return await _cmd_delete(client, args.model)
        if args.command == "generate":
            return await _cmd_generate(
                client,
                args.model,
                args.prompt,
                system=args.system,
                stream=args.stream,
                json_output=args.json_output,
            )
        if args.command == "embed":
            return await _cmd_embed(client, args.model, args.prompt)
    except OllamaStreamError as e:
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 1


# ─────────────────────────────────────────────────────────────────────
# ENTRY POINT
# ─────────────────────────────────────────────────────────────────────


def main(argv: Optional[list[str]] = None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(name)s %(message)s", stream=sys.stderr)

    # Load env
    from dotenv import load_dotenv
    load_dotenv()

    sys.exit(asyncio.run(_dispatch(args)))


if __name__ == "__main__":
    main()
