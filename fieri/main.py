"""OpenAI command-line interface."""

from __future__ import annotations

import logging
import sys
from argparse import ArgumentParser, Namespace
from typing import List, Optional

import structlog

from . import __version__
from .api_resources import model as model_api
from .api_resources.chat import ChatMessage, ChatParam, ChatRole, chat, chat_with_stream
from .core.client import Client
from .core.conversation import Conversation
from .errors import ClientError
from .log import configure_logging
from .ui.interface import UI


logger = structlog.get_logger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"
LOG_LEVELS = ("debug", "info", "warning", "error")


def _build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="fieri", description="OpenAI command-line interface.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="warning",
        help="Log level (default: warning)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    chat_cmd = commands.add_parser("chat", help="Send one chat completion request")
    chat_cmd.add_argument(
        "-m", "--message",
        dest="messages",
        action="append",
        required=True,
        help="Message as 'role:content[:name]'; may be repeated",
    )
    chat_cmd.add_argument("--model", default=DEFAULT_MODEL, help=f"Model id (default: {DEFAULT_MODEL})")
    chat_cmd.add_argument(
        "-r", "--role",
        choices=[role.value for role in ChatRole],
        default=ChatRole.USER.value,
        help="Role of messages given without a role prefix (default: user)",
    )
    chat_cmd.add_argument("--temperature", type=float)
    chat_cmd.add_argument("--max-tokens", type=int)
    chat_cmd.add_argument("--stream", action="store_true", help="Render the answer as it is generated")

    console_cmd = commands.add_parser("console", help="Interactive chat session")
    console_cmd.add_argument("--model", default=DEFAULT_MODEL, help=f"Model id (default: {DEFAULT_MODEL})")
    console_cmd.add_argument("--system", help="System prompt for the session")
    console_cmd.add_argument(
        "--history-file",
        help="Prompt history file (default: $FIERI_HISTORY or ~/.fieri_history)",
    )

    commands.add_parser("models", help="List available models")
    return parser


def _run_chat(client: Client, ui: UI, args: Namespace) -> int:
    messages = [ChatMessage.parse(text, default_role=args.role) for text in args.messages]
    param = ChatParam(
        model=args.model,
        messages=messages,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
    )
    if args.stream:
        with chat_with_stream(client, param) as events:
            ui.stream_markdown(args.model, (
                chunk.choices[0].delta.content or "" for chunk in events if chunk.choices
            ))
    else:
        response = chat(client, param)
        text = response.choices[0].message.content if response.choices else ""
        ui.show_markdown(args.model, text or "")
    return 0


def _run_console(client: Client, ui: UI, args: Namespace) -> int:
    conversation = Conversation(client, model=args.model, system=args.system)
    ui.banner(conversation.model)

    while True:
        try:
            line = ui.get_input().strip()
        except KeyboardInterrupt:
            break
        if not line:
            continue

        if line.startswith("/"):
            command, _, arg = line.partition(" ")
            if command == "/exit":
                break
            elif command == "/reset":
                conversation.reset()
                ui.notice("Conversation cleared.")
            elif command == "/model":
                if arg.strip():
                    conversation.set_model(arg.strip())
                ui.notice(f"Model: {conversation.model}")
            else:
                ui.notice(f"Unknown command {command}")
            continue

        try:
            ui.stream_markdown(conversation.model, conversation.stream(line))
        except KeyboardInterrupt:
            ui.notice("Interrupted.")
        except ClientError as exc:
            logger.debug("console_turn_failed", error=repr(exc))
            ui.show_error(exc)

    ui.console.print("Exiting")
    return 0


def _run_models(client: Client, ui: UI, args: Namespace) -> int:
    models = sorted(model_api.list(client).data, key=lambda m: m.id)
    ui.show_models([m.id for m in models], [m.owned_by for m in models])
    return 0


_COMMANDS = {
    "chat": _run_chat,
    "console": _run_console,
    "models": _run_models,
}


def main(argv: Optional[List[str]] = None, ui: UI = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(level=getattr(logging, args.log_level.upper()))

    ui = ui or UI(history_file=getattr(args, "history_file", None))
    try:
        with Client() as client:
            return _COMMANDS[args.command](client, ui, args)
    except ClientError as exc:
        logger.debug("command_failed", command=args.command, error=repr(exc))
        ui.show_error(exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
