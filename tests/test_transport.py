import asyncio
import os
import unittest
from datetime import datetime, timezone
from unittest import mock

from telegram import Chat, LinkPreviewOptions, Message, Update, User

import watchlist_picker
from watchlist_picker import Film, WatchlistPicker, build_application, on_message

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


class _StubFetcher:
    def __init__(self, films=None) -> None:
        self.films = films or []
        self.calls = []

    def fetch(self, username, list_name):
        self.calls.append((username, list_name))
        return list(self.films)


def _message(text, edited=False):
    extra = {"edit_date": NOW} if edited else {}
    return Message(
        message_id=1,
        date=NOW,
        chat=Chat(id=70, type=Chat.PRIVATE),
        from_user=User(id=7, first_name="Alice", is_bot=False),
        text=text,
        **extra,
    )


def _update(text, user_id=7, chat_id=70):
    update = mock.Mock()
    update.message.text = text
    update.message.chat_id = chat_id
    update.effective_user.id = user_id
    return update


def _context(picker):
    context = mock.Mock()
    context.bot_data = {"picker": picker}
    context.bot.send_message = mock.AsyncMock()
    return context


class TestMessageHandlerFilter(unittest.TestCase):
    def setUp(self) -> None:
        app = build_application("123:abc", WatchlistPicker(fetcher=_StubFetcher()))
        self.handler = app.handlers[0][0]

    def test_new_text_message_is_handled(self) -> None:
        self.assertTrue(self.handler.check_update(Update(update_id=1, message=_message("/random"))))

    def test_edited_message_is_ignored(self) -> None:
        update = Update(update_id=2, edited_message=_message("15", edited=True))
        self.assertFalse(self.handler.check_update(update))


class TestOnMessage(unittest.TestCase):
    def setUp(self) -> None:
        self.fetcher = _StubFetcher([Film(title="Dune", year="2021", url="https://x/dune")])
        self.picker = WatchlistPicker(fetcher=self.fetcher)
        self.context = _context(self.picker)

    def test_film_reply_enables_link_preview(self) -> None:
        asyncio.run(on_message(_update("/set_username alice"), self.context))
        asyncio.run(on_message(_update("/random"), self.context))

        self.assertEqual(self.context.bot.send_message.await_count, 2)
        kwargs = self.context.bot.send_message.await_args.kwargs
        self.assertEqual(kwargs["chat_id"], 70)
        self.assertEqual(kwargs["text"], "Рандомный фильм из вашего Watchlist:\n\nDune (2021)\nhttps://x/dune")
        self.assertIsInstance(kwargs["link_preview_options"], LinkPreviewOptions)
        self.assertFalse(kwargs["link_preview_options"].is_disabled)

    def test_plain_reply_has_no_preview_options(self) -> None:
        asyncio.run(on_message(_update("/help", chat_id=99), self.context))

        kwargs = self.context.bot.send_message.await_args.kwargs
        self.assertEqual(kwargs["chat_id"], 99)
        self.assertIsNone(kwargs["link_preview_options"])

    def test_message_without_text_is_skipped(self) -> None:
        update = _update(None)
        asyncio.run(on_message(update, self.context))
        self.context.bot.send_message.assert_not_awaited()
        self.assertEqual(len(self.picker.sessions), 0)

    def test_update_without_message_or_user_is_skipped(self) -> None:
        no_message = _update("/help")
        no_message.message = None
        no_user = _update("/help")
        no_user.effective_user = None

        asyncio.run(on_message(no_message, self.context))
        asyncio.run(on_message(no_user, self.context))

        self.context.bot.send_message.assert_not_awaited()


class TestMain(unittest.TestCase):
    def test_missing_token_is_fatal(self) -> None:
        with mock.patch.dict(os.environ, clear=True), \
                mock.patch.object(watchlist_picker, "setup_logging"), \
                mock.patch.object(watchlist_picker, "build_application") as build:
            with self.assertRaises(SystemExit):
                watchlist_picker.main([])
        build.assert_not_called()

    def test_token_starts_polling(self) -> None:
        with mock.patch.dict(os.environ, {"TELEGRAM_BOT_TOKEN": "123:abc"}, clear=True), \
                mock.patch.object(watchlist_picker, "setup_logging"), \
                mock.patch.object(watchlist_picker, "build_application") as build:
            watchlist_picker.main([])
        build.assert_called_once_with("123:abc")
        build.return_value.run_polling.assert_called_once()


if __name__ == "__main__":
    unittest.main()
