#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Watchlist Picker — Telegram bot that picks random films from Letterboxd.
- Letterboxd watchlist or any public list, scraped with requests + BeautifulSoup
- Per-user dialog state driven by a LangGraph state machine
- Uniform random picks without replacement (1 or up to 10 films)
- Console mode for local runs without Telegram
"""
import os
import re
import sys
import time
import random
import logging
import argparse
from datetime import datetime
from typing import Dict, List, Optional, TypedDict, Literal, Callable
from urllib.parse import quote, urljoin

import requests
from bs4 import BeautifulSoup
from dotenv import load_dotenv
from pydantic import BaseModel
from langgraph.graph import StateGraph, START, END
from telegram import BotCommand, LinkPreviewOptions, Update
from telegram.ext import Application, ContextTypes, MessageHandler, filters

load_dotenv()

logger = logging.getLogger(__name__)

# =========================
# Config & env
# =========================
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_DIR = os.getenv("LOG_DIR", "logs")
LETTERBOXD_BASE = os.getenv("LETTERBOXD_BASE", "https://letterboxd.com").rstrip("/")
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "10"))
USER_AGENT = os.getenv(
    "USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36",
)

WATCHLIST = "watchlist"  # Sentinel list name for the user's own watchlist
MAX_RANDOM_COUNT = 10    # Upper bound for /random_n

# =========================
# Logging Configuration
# =========================
def setup_logging(console_level: int = logging.INFO):
    """Configure logging with both file and console handlers."""
    if not os.path.exists(LOG_DIR):
        os.makedirs(LOG_DIR)

    log_filename = os.path.join(LOG_DIR, f"watchlist_picker_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log")

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if DEBUG else logging.INFO)
    root.handlers.clear()

    # File handler - detailed logs
    file_handler = logging.FileHandler(log_filename, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    root.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
    root.addHandler(console_handler)

    # python-telegram-bot logs every long-polling request through httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)

    root.info("=" * 80)
    root.info("Watchlist Picker Started")
    root.info(f"Log file: {log_filename}")
    root.info(f"Debug mode: {DEBUG}")
    root.info("=" * 80)

    return root

# =========================
# Bot texts
# =========================
HELP_TEXT = (
    "Список доступных команд:\n\n"
    "/start - Начать работу с ботом\n"
    "/help - Показать справку по командам\n"
    "/cancel - Отменить текущую команду\n"
    "/set_username - Установить имя пользователя Letterboxd\n"
    "/random - Получить случайный фильм из вашего Watchlist\n"
    "/random_n - Получить N случайных фильмов (где N от 1 до 10)\n"
    "/list - Получить случайный фильм из публичного списка\n"
)

START_TEXT = (
    "Добро пожаловать в Letterboxd Watchlist Picker Bot! 🎬\n\n"
    "Я помогу выбрать случайный фильм из вашего Watchlist или из любого публичного списка.\n\n"
    "Чтобы начать, установите свое имя пользователя Letterboxd с помощью команды /set_username\n\n"
    "Для справки используйте /help"
)

CANCELLED_TEXT = "Команда отменена. Вы можете начать заново."
ASK_USERNAME_TEXT = "Введите ваше имя пользователя Letterboxd."
USERNAME_SET_TEXT = "Имя пользователя Letterboxd установлено: {username}"
ASK_LIST_OWNER_TEXT = "Введите имя пользователя Letterboxd, чей список вы хотите просмотреть."
ASK_LIST_NAME_TEXT = "Имя держателя списка установлено: {owner}\nТеперь введите название публичного списка."
ASK_COUNT_TEXT = "Введите количество рандомных фильмов (от 1 до 10)."
INVALID_COUNT_TEXT = "Пожалуйста, введите корректное число (целое положительное число)."
HANDLE_NOT_SET_TEXT = "Сначала установите имя пользователя Letterboxd с помощью команды /set_username."

LIST_FETCH_FAILED_TEXT = (
    "Не удалось получить список фильмов. Возможные причины:\n"
    "- Пользователь '{owner}' не найден\n"
    "- Список '{label}' не существует\n"
    "- Список является приватным"
)
WATCHLIST_FETCH_FAILED_TEXT = (
    "Не удалось получить watchlist. Возможные причины:\n"
    "- Пользователь '{username}' не найден\n"
    "- Watchlist является приватным"
)
LIST_EMPTY_TEXT = "Список '{label}' пользователя '{owner}' пуст или не содержит фильмов."
WATCHLIST_EMPTY_TEXT = "Ваш Watchlist пуст или не содержит фильмов."

BOT_COMMANDS = [
    ("start", "Начать работу с ботом"),
    ("help", "Показать справку по командам"),
    ("cancel", "Отменить текущую команду"),
    ("set_username", "Установить имя пользователя Letterboxd"),
    ("random", "Случайный фильм из вашего Watchlist"),
    ("random_n", "N случайных фильмов из вашего Watchlist"),
    ("list", "Случайный фильм из публичного списка"),
]

# =========================
# Pydantic models (typed I/O)
# =========================
class Film(BaseModel):
    """One catalogue entry scraped from a list page."""
    id: str = ""
    title: str
    year: str = ""
    url: str

    @property
    def display_title(self) -> str:
        return f"{self.title} ({self.year})" if self.year else self.title


DialogState = Literal[
    "none",
    "awaiting_username",
    "awaiting_list_owner",
    "awaiting_list_name",
    "awaiting_random_count",
]

STATE_NONE = "none"
STATE_USERNAME = "awaiting_username"
STATE_LIST_OWNER = "awaiting_list_owner"
STATE_LIST_NAME = "awaiting_list_name"
STATE_RANDOM_COUNT = "awaiting_random_count"


class UserState(BaseModel):
    """Per-user dialog state. Lives in memory until the process exits."""
    username: str = ""
    dialog_state: DialogState = STATE_NONE
    pending_list_owner: str = ""  # Only meaningful while awaiting the list name


class ChatEvent(BaseModel):
    """An inbound chat message, either a command or free text."""
    user_id: int
    chat_id: int
    text: str = ""
    command: Optional[str] = None
    args: str = ""


class Reply(BaseModel):
    """One outbound message for the chat the event came from."""
    text: str
    link_preview: bool = False


COMMAND_RE = re.compile(r"^/([A-Za-z0-9_]{1,32})(?:@\w+)?(?:\s+(.*))?$", re.DOTALL)


def parse_chat_event(user_id: int, chat_id: int, text: str) -> ChatEvent:
    """Split a raw message into a command event or a free-text event."""
    text = text or ""
    match = COMMAND_RE.match(text.strip())
    if match:
        return ChatEvent(
            user_id=user_id,
            chat_id=chat_id,
            text=text,
            command=match.group(1).lower(),
            args=(match.group(2) or "").strip(),
        )
    return ChatEvent(user_id=user_id, chat_id=chat_id, text=text)

# =========================
# Errors
# =========================
class PickerError(Exception):
    """Base class for failures handled inside a single dialog step."""
    pass


class FetchError(PickerError):
    """The list page could not be retrieved."""
    pass


class FetchUnreachable(FetchError):
    """Network or HTTP failure while requesting the page."""
    pass


class NoResponseError(FetchError):
    """A response arrived but no document body was found in it."""
    pass


class FetchEmpty(PickerError):
    """The page was retrieved but the list holds no films."""

    def __init__(self, owner: str, list_name: str):
        super().__init__(f"List '{list_name}' of '{owner}' is empty")
        self.owner = owner
        self.list_name = list_name


class InvalidCountError(PickerError):
    """The requested number of films is not a positive integer."""
    pass


class HandleNotSetError(PickerError):
    """The user has not configured their Letterboxd handle yet."""
    pass

# =========================
# Letterboxd scraping
# =========================
def normalize_username(username: str) -> str:
    return (username or "").strip().lower()


def normalize_list_name(list_name: str) -> str:
    """Lowercase, trim and turn spaces into hyphens, e.g. 'Top 10' -> 'top-10'."""
    return (list_name or "").strip().lower().replace(" ", "-")


def _parse_legacy_posters(document: BeautifulSoup, base: str) -> List[Film]:
    films = []
    for container in document.select(".poster-container"):
        poster = container.select_one(".film-poster")
        if poster is None:
            continue

        title = poster.get("alt") or ""
        if not title:
            img = poster.find("img")
            title = img.get("alt", "") if img else ""
        link = poster.get("data-target-link") or ""
        if not title or not link:
            logger.debug(f"Skipping poster without title or link: {container.get('data-film-id')}")
            continue

        films.append(Film(
            id=container.get("data-film-id") or poster.get("data-film-id") or "",
            title=title,
            year=poster.get("data-film-release-year") or "",
            url=urljoin(base + "/", link),
        ))
    return films


def _parse_lazy_posters(document: BeautifulSoup, base: str) -> List[Film]:
    films = []
    for card in document.select("div.react-component[data-component-class='LazyPoster']"):
        title = card.get("data-item-name") or ""
        if not title:
            img = card.find("img")
            title = img.get("alt", "") if img else ""
        link = card.get("data-target-link") or card.get("data-item-link") or ""
        if not title or not link:
            continue

        films.append(Film(
            id=card.get("data-film-id") or "",
            title=title,
            year=card.get("data-film-release-year") or "",
            url=urljoin(base + "/", link),
        ))
    return films


def parse_films(document: BeautifulSoup, base: str = LETTERBOXD_BASE) -> List[Film]:
    """
    Extract films from a list or watchlist page.
    Reads the classic poster-container markup and falls back to the
    LazyPoster cards newer pages render instead.
    """
    films = _parse_legacy_posters(document, base)
    if not films:
        films = _parse_lazy_posters(document, base)
    return films


class LetterboxdClient:
    """Fetches Letterboxd watchlists and public lists as Film collections."""

    def __init__(self, base: str = LETTERBOXD_BASE, timeout: int = REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base = base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})

    def list_url(self, username: str, list_name: str) -> str:
        username = quote(normalize_username(username), safe="")
        list_name = normalize_list_name(list_name)
        if list_name == WATCHLIST:
            return f"{self.base}/{username}/watchlist/"
        return f"{self.base}/{username}/list/{quote(list_name, safe='')}/"

    def fetch_document(self, url: str) -> BeautifulSoup:
        """GET a page and parse it. Any transport or HTTP error is final, there is no retry."""
        logger.info(f"Fetching {url}")
        try:
            r = self.session.get(url, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Request to {url} failed: {e}")
            raise FetchUnreachable(f"Could not connect to Letterboxd: {e}") from e
        return BeautifulSoup(r.text, "html.parser")

    def fetch(self, username: str, list_name: str) -> List[Film]:
        """
        Return the films of `list_name` owned by `username`.
        An empty list is a valid result; FetchError means the page itself
        could not be retrieved.
        """
        url = self.list_url(username, list_name)
        document = self.fetch_document(url)

        if document.body is None:
            logger.warning(f"No document body in response from {url}")
            raise NoResponseError(f"No response body received from {url}")

        films = parse_films(document, self.base)
        logger.info(f"Scraped {len(films)} films from {url}")
        return films

# =========================
# Selection & formatting
# =========================
def select_random_films(films: List[Film], count: int,
                        rng: Optional[random.Random] = None) -> List[Film]:
    """
    Shuffle `films` in place and return the first `count` of them.
    `count` is clamped to the collection size; zero or less gives [].
    """
    if rng is None:
        rng = random.Random(time.time_ns())
    count = max(0, min(count, len(films)))
    rng.shuffle(films)
    return films[:count]


def format_films_response(films: List[Film], original_list_name: str, username: str) -> str:
    """Render picked films as one message. `films` must not be empty."""
    from_watchlist = original_list_name == WATCHLIST

    if len(films) == 1:
        film = films[0]
        if from_watchlist:
            return f"Рандомный фильм из вашего Watchlist:\n\n{film.display_title}\n{film.url}"
        return (f"Рандомный фильм из списка '{original_list_name}' пользователя {username}:\n\n"
                f"{film.display_title}\n{film.url}")

    if from_watchlist:
        header = "Рандомные фильмы из вашего Watchlist:\n\n"
    else:
        header = f"Рандомные фильмы из списка '{original_list_name}' пользователя {username}:\n\n"

    entries = [f"{i}. {film.display_title}\n{film.url}" for i, film in enumerate(films, start=1)]
    return header + "\n\n".join(entries)


def parse_count(text: str) -> int:
    """Parse a positive integer count, accepting an optional sign and ASCII digits only."""
    text = (text or "").strip()
    if not re.fullmatch(r"[+-]?[0-9]+", text):
        raise InvalidCountError(f"Not a number: {text!r}")
    count = int(text)
    if count < 1:
        raise InvalidCountError(f"Count must be positive: {count}")
    return count

# =========================
# Session store
# =========================
class SessionStore:
    """In-memory per-user state, keyed by chat user id."""

    def __init__(self):
        self._states: Dict[int, UserState] = {}

    def get_or_create(self, user_id: int) -> UserState:
        state = self._states.get(user_id)
        if state is None:
            state = UserState()
            self._states[user_id] = state
            logger.info(f"New session for user {user_id}")
        return state

    def reset(self, user_id: int) -> UserState:
        """Drop any pending dialog. The configured handle is kept."""
        state = self.get_or_create(user_id)
        state.dialog_state = STATE_NONE
        state.pending_list_owner = ""
        return state

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._states

    def __len__(self) -> int:
        return len(self._states)

# =========================
# LangGraph State Definition
# =========================
class ConversationState(TypedDict):
    """State for one pass of an event through the conversation graph."""
    picker: 'WatchlistPicker'
    user: UserState
    event: ChatEvent
    replies: List[Reply]


def _reply(state: ConversationState, text: str, link_preview: bool = False) -> ConversationState:
    state["replies"].append(Reply(text=text, link_preview=link_preview))
    return state


def _finish_dialog(state: ConversationState) -> None:
    state["picker"].sessions.reset(state["event"].user_id)

# =========================
# LangGraph Node Functions
# =========================
ANSWER_NODES = {
    STATE_USERNAME: "answer_username",
    STATE_LIST_OWNER: "answer_list_owner",
    STATE_LIST_NAME: "answer_list_name",
    STATE_RANDOM_COUNT: "answer_random_count",
}

COMMAND_NODES = {"start", "help", "set_username", "list", "random", "random_n"}


def router_entry(state: ConversationState) -> ConversationState:
    """Entry node; routing is done by route_event."""
    return state


def route_event(state: ConversationState) -> str:
    """
    Pick the single node that handles this event.
    /cancel wins over everything. Plain text answers a pending prompt.
    Commands are never consumed as answers.
    """
    event = state["event"]
    user = state["user"]

    if event.command == "cancel":
        return "cancel"
    if event.command is None and event.text and user.dialog_state != STATE_NONE:
        return ANSWER_NODES[user.dialog_state]
    if event.command in COMMAND_NODES:
        return event.command

    logger.debug(f"Ignoring event from user {event.user_id}: command={event.command!r}")
    return "ignore"


def cancel_node(state: ConversationState) -> ConversationState:
    _finish_dialog(state)
    return _reply(state, CANCELLED_TEXT)


def start_node(state: ConversationState) -> ConversationState:
    return _reply(state, START_TEXT)


def help_node(state: ConversationState) -> ConversationState:
    return _reply(state, HELP_TEXT)


def set_username_node(state: ConversationState) -> ConversationState:
    user = state["user"]
    username = normalize_username(state["event"].args)
    if username:
        user.username = username
        logger.info(f"User {state['event'].user_id} set handle '{username}'")
        return _reply(state, USERNAME_SET_TEXT.format(username=username))

    user.dialog_state = STATE_USERNAME
    return _reply(state, ASK_USERNAME_TEXT)


def list_node(state: ConversationState) -> ConversationState:
    state["user"].dialog_state = STATE_LIST_OWNER
    return _reply(state, ASK_LIST_OWNER_TEXT)


def random_node(state: ConversationState) -> ConversationState:
    """Single pick from the user's own watchlist, no prompt."""
    return _send_watchlist_pick(state, 1)


def random_n_node(state: ConversationState) -> ConversationState:
    user = state["user"]
    try:
        _require_handle(user)
    except HandleNotSetError:
        return _reply(state, HANDLE_NOT_SET_TEXT)
    user.dialog_state = STATE_RANDOM_COUNT
    return _reply(state, ASK_COUNT_TEXT)


def answer_username_node(state: ConversationState) -> ConversationState:
    user = state["user"]
    username = normalize_username(state["event"].text)
    user.username = username
    _finish_dialog(state)
    logger.info(f"User {state['event'].user_id} set handle '{username}'")
    return _reply(state, USERNAME_SET_TEXT.format(username=username))


def answer_list_owner_node(state: ConversationState) -> ConversationState:
    user = state["user"]
    owner = normalize_username(state["event"].text)
    user.pending_list_owner = owner
    user.dialog_state = STATE_LIST_NAME
    return _reply(state, ASK_LIST_NAME_TEXT.format(owner=owner))


def answer_list_name_node(state: ConversationState) -> ConversationState:
    picker = state["picker"]
    label = state["event"].text
    owner = state["user"].pending_list_owner
    _finish_dialog(state)

    try:
        films = picker.pick_films(owner, label, 1)
    except FetchError as e:
        logger.warning(f"Failed to fetch list '{label}' of '{owner}': {e}")
        return _reply(state, LIST_FETCH_FAILED_TEXT.format(owner=owner, label=label))
    except FetchEmpty:
        return _reply(state, LIST_EMPTY_TEXT.format(owner=owner, label=label))

    return _reply(state, format_films_response(films, label, owner), link_preview=True)


def answer_random_count_node(state: ConversationState) -> ConversationState:
    _finish_dialog(state)

    try:
        count = min(parse_count(state["event"].text), MAX_RANDOM_COUNT)
    except InvalidCountError as e:
        logger.info(f"Rejected count from user {state['event'].user_id}: {e}")
        return _reply(state, INVALID_COUNT_TEXT)

    return _send_watchlist_pick(state, count)


def _require_handle(user: UserState) -> str:
    if not user.username:
        raise HandleNotSetError("Letterboxd handle is not set")
    return user.username


def _send_watchlist_pick(state: ConversationState, count: int) -> ConversationState:
    picker = state["picker"]
    username = state["user"].username

    try:
        films = picker.pick_films(_require_handle(state["user"]), WATCHLIST, count)
    except HandleNotSetError:
        return _reply(state, HANDLE_NOT_SET_TEXT)
    except FetchError as e:
        logger.warning(f"Failed to fetch watchlist of '{username}': {e}")
        return _reply(state, WATCHLIST_FETCH_FAILED_TEXT.format(username=username))
    except FetchEmpty:
        return _reply(state, WATCHLIST_EMPTY_TEXT)

    return _reply(state, format_films_response(films, WATCHLIST, username), link_preview=True)

# =========================
# LangGraph Graph Builder
# =========================
def build_conversation_graph():
    """
    Build the conversation graph. Every event enters at router_entry and
    runs exactly one handler node before the graph ends.
    """
    logger.info("Building LangGraph conversation flow")

    workflow = StateGraph(ConversationState)

    handlers = {
        "cancel": cancel_node,
        "start": start_node,
        "help": help_node,
        "set_username": set_username_node,
        "list": list_node,
        "random": random_node,
        "random_n": random_n_node,
        "answer_username": answer_username_node,
        "answer_list_owner": answer_list_owner_node,
        "answer_list_name": answer_list_name_node,
        "answer_random_count": answer_random_count_node,
    }

    workflow.add_node("router_entry", router_entry)
    for name, node in handlers.items():
        workflow.add_node(name, node)
        workflow.add_edge(name, END)

    workflow.add_edge(START, "router_entry")

    routes = {name: name for name in handlers}
    routes["ignore"] = END
    workflow.add_conditional_edges("router_entry", route_event, routes)

    app = workflow.compile()

    logger.info("LangGraph conversation flow built successfully")
    return app

# =========================
# Picker
# =========================
class WatchlistPicker:
    """Owns the user sessions and runs each chat event through the graph."""

    def __init__(self, fetcher=None,
                 rng_factory: Optional[Callable[[], random.Random]] = None):
        self.fetcher = fetcher or LetterboxdClient()
        self.rng_factory = rng_factory or (lambda: random.Random(time.time_ns()))
        self.sessions = SessionStore()
        self.graph = build_conversation_graph()

    def pick_films(self, owner: str, list_name: str, count: int) -> List[Film]:
        """Fetch a list and pick `count` random films. Raises FetchError or FetchEmpty."""
        films = self.fetcher.fetch(owner, normalize_list_name(list_name))
        if not films:
            raise FetchEmpty(owner, list_name)
        return select_random_films(films, count, self.rng_factory())

    def handle(self, event: ChatEvent) -> List[Reply]:
        """Process one event for its user and return the replies to send."""
        user = self.sessions.get_or_create(event.user_id)
        logger.debug(f"Event from user {event.user_id} in state '{user.dialog_state}': "
                     f"command={event.command!r}")

        state: ConversationState = {
            "picker": self,
            "user": user,
            "event": event,
            "replies": [],
        }
        state = self.graph.invoke(state)
        return state["replies"]

# =========================
# Telegram transport
# =========================
async def on_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    message = update.message
    if message is None or not message.text or update.effective_user is None:
        return

    picker: WatchlistPicker = context.bot_data["picker"]
    event = parse_chat_event(update.effective_user.id, message.chat_id, message.text)

    # Updates are processed one at a time (concurrent_updates is off), so each user's events stay ordered
    for reply in picker.handle(event):
        await context.bot.send_message(
            chat_id=event.chat_id,
            text=reply.text,
            link_preview_options=LinkPreviewOptions(is_disabled=False) if reply.link_preview else None,
        )


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error(f"Error while handling update {update}: {context.error}", exc_info=context.error)


async def post_init(application: Application) -> None:
    logger.info(f"Bot authorized as {application.bot.username}")
    await application.bot.set_my_commands([BotCommand(name, description) for name, description in BOT_COMMANDS])


def build_application(token: str, picker: Optional[WatchlistPicker] = None) -> Application:
    application = Application.builder().token(token).post_init(post_init).build()
    application.bot_data["picker"] = picker or WatchlistPicker()
    application.add_handler(MessageHandler(filters.TEXT & filters.UpdateType.MESSAGE, on_message))
    application.add_error_handler(on_error)
    return application

# =========================
# Runtime CLI
# =========================
CONSOLE_USER_ID = 0


def run_console(picker: Optional[WatchlistPicker] = None):
    """Talk to the bot from a terminal, as a single local user."""
    logger.info("Starting console interface")
    picker = picker or WatchlistPicker()

    print("🎬 Watchlist Picker — console mode")
    print("Type commands like /set_username or /random. 'exit' to quit.\n")

    while True:
        try:
            user_input = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye! 👋")
            break

        if not user_input:
            continue
        if user_input.lower() in {"exit", "quit"}:
            print("Goodbye! 👋")
            break

        event = parse_chat_event(CONSOLE_USER_ID, CONSOLE_USER_ID, user_input)
        for reply in picker.handle(event):
            print(f"\nbot> {reply.text}\n")


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Pick random films from Letterboxd lists.")
    parser.add_argument("--console", action="store_true", help="chat from the terminal instead of Telegram")
    args = parser.parse_args(argv)

    setup_logging(logging.ERROR if args.console else logging.INFO)

    if args.console:
        run_console()
        return

    token = os.getenv("TELEGRAM_BOT_TOKEN")
    if not token:
        logger.error("Missing TELEGRAM_BOT_TOKEN environment variable")
        raise SystemExit("❌ Error: Missing TELEGRAM_BOT_TOKEN. Please set it in your .env file.")

    application = build_application(token)
    logger.info("Starting long polling")
    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    try:
        main(sys.argv[1:])
    except KeyboardInterrupt:
        logger.info("Application interrupted by user (Ctrl+C)")
    except Exception as e:
        logger.critical(f"Unexpected fatal error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        logger.info("Watchlist Picker stopped")
