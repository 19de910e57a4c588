import argparse
import io
import logging
import pytest

from webcrawl_chat.cli import main as cli
from webcrawl_chat.config.config import AppConfig
from webcrawl_chat.schemas.backend_schema import KeywordDetail
from webcrawl_chat.schemas.chat_schema import ChatMessage
from webcrawl_chat.storage.memory import InMemoryStorage
from webcrawl_chat.utils.error_handler import ConfigurationError, NetworkError, ValidationError


class TestStreamPrinter:

    def test_writes_only_new_characters(self):
        out = io.StringIO()
        printer = cli.StreamPrinter(out)

        for text in ("", "H", "He", "Hel"):
            printer(text)

        assert out.getvalue() == "Hel"

    def test_new_render_starts_on_new_line(self):
        out = io.StringIO()
        printer = cli.StreamPrinter(out)

        for text in ("ab", "abc", "", "x"):
            printer(text)

        assert out.getvalue() == "abc\nx"


class TestParser:

    def test_crawl_with_urls(self):
        args = cli.build_parser().parse_args(
            ["crawl", "python", "--domain", "org", "--url", "example.com", "--url", "example.org"]
        )

        assert args.command == "crawl"
        assert args.keyword == "python"
        assert args.domain == "org"
        assert args.url == ["example.com", "example.org"]

    def test_crawl_defaults(self):
        args = cli.build_parser().parse_args(["crawl", "python"])

        assert args.domain is None
        assert args.url == []

    def test_log_level(self):
        args = cli.build_parser().parse_args(["--log-level", "DEBUG", "history"])

        assert args.log_level == "DEBUG"

    def test_threads_command(self):
        assert cli.build_parser().parse_args(["threads"]).command == "threads"

    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


@pytest.mark.asyncio
class TestCommands:

    async def test_crawl(self, controller, capsys):
        args = argparse.Namespace(keyword="python", domain="org", url=[])

        assert await cli.run_crawl(controller, args) == 0

        out = capsys.readouterr().out
        assert "Session: kw-1" in out
        assert "URLs crawled: 2" in out
        assert "  - a\n" in out
        assert controller.display_text == "Hello"

    async def test_history(self, controller, capsys):
        assert await cli.run_history(controller, argparse.Namespace()) == 0

        assert "kw-1  python  (org, 2 URLs)" in capsys.readouterr().out

    async def test_empty_history(self, controller, mock_client, capsys):
        mock_client.list_keywords.return_value = []

        await cli.run_history(controller, argparse.Namespace())

        assert "No crawl sessions yet." in capsys.readouterr().out

    async def test_show(self, controller, mock_client, thread_store, capsys):
        mock_client.get_keyword.return_value = KeywordDetail(
            id="kw-1", keyword="python", site_domain="org", urls=["a", "b"], summary="Hello"
        )
        await thread_store.append("kw-1", ChatMessage.user("earlier"))
        await thread_store.append("kw-1", ChatMessage.assistant("answer"))

        assert await cli.run_show(controller, argparse.Namespace(session_id="kw-1")) == 0

        out = capsys.readouterr().out
        assert "Keyword: python" in out
        assert "URLs: 2" in out
        assert "Hello" in out
        assert "You: earlier" in out
        assert "Assistant: answer" in out

    async def test_show_without_detail(self, controller, mock_client, capsys):
        mock_client.get_keyword.side_effect = NetworkError("down")

        await cli.run_show(controller, argparse.Namespace(session_id="kw-1"))

        assert "Failed to load crawl data" in capsys.readouterr().err

    async def test_threads(self, controller, thread_store, capsys):
        await thread_store.append("kw-1", ChatMessage.user("q"))
        await thread_store.append("kw-1", ChatMessage.assistant("a"))
        await thread_store.append("kw-2", ChatMessage.user("other"))

        assert await cli.run_threads(controller, argparse.Namespace()) == 0

        out = capsys.readouterr().out
        assert "kw-1  (2 messages)" in out
        assert "kw-2  (1 messages)" in out

    async def test_no_threads(self, controller, capsys):
        await cli.run_threads(controller, argparse.Namespace())

        assert "No saved chat threads." in capsys.readouterr().out

    async def test_chat_loop(self, controller, mock_client, monkeypatch, capsys):
        mock_client.get_keyword.return_value = KeywordDetail(id="kw-1", keyword="python")
        answers = iter(["what is it?", "", "exit"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))

        assert await cli.run_chat(controller, argparse.Namespace(session_id="kw-1")) == 0

        out = capsys.readouterr().out
        assert "Chatting about 'python'" in out
        assert "Assistant: Here is what I found." in out
        mock_client.discuss.assert_awaited_once_with("kw-1", "what is it?")

    async def test_build_controller(self, mock_client):
        controller, storage = await cli.build_controller(AppConfig(), mock_client)

        assert isinstance(storage, InMemoryStorage)
        assert controller.renderer.tick_interval == pytest.approx(0.005)


class TestMain:

    @pytest.fixture(autouse=True)
    def quiet_logging(self, monkeypatch):
        monkeypatch.setattr(cli, "create_logger", lambda *args, **kwargs: logging.getLogger("webcrawl_chat"))
        monkeypatch.setattr(cli, "get_config", lambda: AppConfig())

    @pytest.mark.parametrize("error,code", [
        (ValidationError("Keyword is required"), 2),
        (NetworkError("Backend API error: 500", status_code=500), 1),
        (EOFError(), 130),
    ])
    def test_exit_codes(self, monkeypatch, error, code):
        async def failing_run(args, config):
            raise error

        monkeypatch.setattr(cli, "run", failing_run)

        assert cli.main(["history"]) == code

    def test_success(self, monkeypatch):
        async def ok_run(args, config):
            assert args.command == "history"
            return 0

        monkeypatch.setattr(cli, "run", ok_run)

        assert cli.main(["history"]) == 0

    def test_configuration_error(self, monkeypatch, capsys):
        def broken_config():
            raise ConfigurationError("Error loading configuration: bad value")

        monkeypatch.setattr(cli, "get_config", broken_config)

        assert cli.main(["history"]) == 1
        assert "bad value" in capsys.readouterr().err
