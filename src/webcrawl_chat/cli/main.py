#!/usr/bin/env python3
import argparse
import asyncio
import sys
from typing import List, Optional, TextIO, Tuple

from webcrawl_chat.backend.client import BackendClient
from webcrawl_chat.chat.thread_store import ChatThreadStore
from webcrawl_chat.config.config import AppConfig, get_config
from webcrawl_chat.core.base import BaseStorage
from webcrawl_chat.core.utils import WebCrawlChatError
from webcrawl_chat.history.index import HistoryIndex
from webcrawl_chat.schemas.chat_schema import ChatMessage
from webcrawl_chat.session.controller import SessionController
from webcrawl_chat.storage.factory import create_storage
from webcrawl_chat.streaming.renderer import StreamRenderer
from webcrawl_chat.utils import NetworkError, ValidationError, create_logger

EXIT_COMMANDS = {"exit", "quit"}


class StreamPrinter:
    """Writes only the newly revealed part of the display buffer."""

    def __init__(self, stream: TextIO = sys.stdout):
        self.stream = stream
        self.shown = 0

    def __call__(self, text: str) -> None:
        if len(text) < self.shown:
            # A new render started
            self.stream.write("\n")
            self.shown = 0
        self.stream.write(text[self.shown:])
        self.stream.flush()
        self.shown = len(text)


async def build_controller(
    config: AppConfig,
    client: BackendClient,
    printer: Optional[StreamPrinter] = None,
) -> Tuple[SessionController, BaseStorage]:
    storage = await create_storage(config.storage)
    renderer = StreamRenderer(tick_interval=config.streaming.tick_interval, on_display=printer)
    controller = SessionController(
        client,
        ChatThreadStore(storage),
        history=HistoryIndex(client),
        renderer=renderer,
    )
    return controller, storage


def _print_messages(messages: List[ChatMessage], stream: TextIO = sys.stdout) -> None:
    for message in messages:
        speaker = "You" if message.role.value == "user" else "Assistant"
        stream.write(f"[{message.timestamp:%Y-%m-%d %H:%M}] {speaker}: {message.content}\n")


async def run_crawl(controller: SessionController, args: argparse.Namespace) -> int:
    await controller.start()
    session = await controller.start_crawl(args.keyword, domain=args.domain, urls=args.url)
    await controller.wait_for_render()
    print()
    print(f"\nSession: {session.id or '(no id returned)'}")
    print(f"URLs crawled: {session.urls_crawled}")
    for url in session.urls:
        print(f"  - {url}")
    return 0


async def run_history(controller: SessionController, args: argparse.Namespace) -> int:
    entries = await controller.refresh_history()
    if not entries:
        print("No crawl sessions yet.")
        return 0
    for entry in entries:
        print(f"{entry.id}  {entry.keyword}  ({entry.site_domain or '-'}, {entry.url_count} URLs)")
    return 0


async def run_show(controller: SessionController, args: argparse.Namespace) -> int:
    opened = await controller.open_session(args.session_id)
    if opened.detail is None:
        print("Failed to load crawl data", file=sys.stderr)
    else:
        print(f"Keyword: {opened.detail.keyword}")
        print(f"Domain: {opened.detail.site_domain or '-'}")
        print(f"URLs: {len(opened.detail.urls)}")
        print()
        print(opened.detail.summary)
        print()
    _print_messages(opened.messages)
    return 0


async def run_threads(controller: SessionController, args: argparse.Namespace) -> int:
    session_ids = await controller.thread_store.session_ids()
    if not session_ids:
        print("No saved chat threads.")
        return 0
    for session_id in session_ids:
        messages = await controller.thread_store.load(session_id)
        print(f"{session_id}  ({len(messages)} messages)")
    return 0


async def run_chat(controller: SessionController, args: argparse.Namespace) -> int:
    opened = await controller.open_session(args.session_id)
    if opened.detail is not None:
        print(f"Chatting about '{opened.detail.keyword}'. Type 'exit' to quit.\n")
    _print_messages(opened.messages)

    known = len(opened.messages)
    while True:
        prompt = (await asyncio.to_thread(input, "You: ")).strip()
        if prompt.lower() in EXIT_COMMANDS:
            break
        if not prompt:
            continue
        thread = await controller.send_message(args.session_id, prompt)
        # The user's own line is already on screen
        for message in thread[known:]:
            if message.role.value == "assistant":
                print(f"\nAssistant: {message.content}\n")
        known = len(thread)
    return 0


COMMANDS = {
    "crawl": run_crawl,
    "history": run_history,
    "show": run_show,
    "threads": run_threads,
    "chat": run_chat,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="webcrawl-chat", description="Crawl a site for a keyword and chat about it")
    parser.add_argument('--log-level', default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: from config)')
    subparsers = parser.add_subparsers(dest="command", required=True)

    crawl = subparsers.add_parser("crawl", help="Start a crawl and stream its summary")
    crawl.add_argument("keyword", help="Keyword to crawl for")
    crawl.add_argument("--domain", help="Domain token to search, e.g. com, lk, org")
    crawl.add_argument("--url", action="append", default=[], help="Candidate URL (repeatable); takes precedence over --domain")

    subparsers.add_parser("history", help="List previous crawl sessions")

    show = subparsers.add_parser("show", help="Show a crawl session and its chat thread")
    show.add_argument("session_id")

    subparsers.add_parser("threads", help="List sessions with a saved chat thread")

    chat = subparsers.add_parser("chat", help="Chat about a crawl session")
    chat.add_argument("session_id")
    return parser


async def run(args: argparse.Namespace, config: AppConfig) -> int:
    async with BackendClient(config.backend) as client:
        controller, storage = await build_controller(config, client, StreamPrinter())
        try:
            return await COMMANDS[args.command](controller, args)
        finally:
            await controller.close()
            await storage.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = get_config()
    except WebCrawlChatError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    logger = create_logger(args.log_level or config.app.log_level, config.app.log_file)

    try:
        return asyncio.run(run(args, config))
    except ValidationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2
    except NetworkError as e:
        print(f"\nError: {e.message}", file=sys.stderr)
        return 1
    except WebCrawlChatError as e:
        logger.error(f"{e}", exc_info=True)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except (KeyboardInterrupt, EOFError):
        return 130


if __name__ == "__main__":
    sys.exit(main())
