"""Operator-facing texts for channel_feed.

Replies are sent with HTML parse mode. The reply keyboard labels are
normalized back to canonical commands before dispatch.
"""

from typing import Any

__all__ = [
    "BUTTON_HELP",
    "BUTTON_START_IMPORT",
    "BUTTON_STATUS",
    "BUTTON_STOP_IMPORT",
    "BUTTON_COMMANDS",
    "DOWNLOAD_FAILED",
    "DOWNLOAD_FAILED_FORWARDED",
    "HELP_TEXT",
    "IMPORT_ACCOUNT_NOT_LINKED",
    "IMPORT_COLLECTION_NOT_FOUND",
    "NO_ACTIVE_IMPORT",
    "NO_ACTIVE_IMPORT_STATUS",
    "file_too_large",
    "import_completed",
    "import_started",
    "import_status",
    "main_menu_keyboard",
]

BUTTON_START_IMPORT = "▶️ Начать импорт"
BUTTON_STOP_IMPORT = "⏹ Завершить импорт"
BUTTON_STATUS = "📊 Статус"
BUTTON_HELP = "❓ Помощь"

BUTTON_COMMANDS = {
    BUTTON_START_IMPORT: "/import",
    BUTTON_STOP_IMPORT: "/done",
    BUTTON_STATUS: "/status",
    BUTTON_HELP: "/help",
}

HELP_TEXT = (
    "<b>Бот для импорта сообщений в курс</b>\n\n"
    "<b>Как использовать:</b>\n"
    f"1. Нажмите <b>{BUTTON_START_IMPORT}</b>\n"
    "2. Пересылайте сообщения из вашего канала боту\n"
    f"3. Нажмите <b>{BUTTON_STOP_IMPORT}</b>\n\n"
    "<b>Команды:</b>\n"
    "/import — начать импорт\n"
    "/done — завершить импорт\n"
    "/status — статус текущего импорта\n"
    "/help — эта справка"
)

NO_ACTIVE_IMPORT = "❌ Нет активного импорта."
NO_ACTIVE_IMPORT_STATUS = (
    f"{NO_ACTIVE_IMPORT}\n\nНажмите <b>{BUTTON_START_IMPORT}</b> чтобы начать."
)
IMPORT_COLLECTION_NOT_FOUND = (
    "❌ Курс для этого бота не найден. Проверьте настройки на платформе."
)
IMPORT_ACCOUNT_NOT_LINKED = "❌ Ваш аккаунт Telegram не привязан к платформе."

DOWNLOAD_FAILED = "Не удалось скачать файл из Telegram"
DOWNLOAD_FAILED_FORWARDED = (
    "Не удалось скачать файл из Telegram. "
    "Возможно файл превышает 20 MB или недоступен."
)


def file_too_large(file_size: int, noun: str) -> str:
    """Error recorded for media above the Bot API download limit.

    Args:
        file_size: Declared size in bytes
        noun: What to upload manually ("видео", "файл")
    """
    size_mb = file_size / 1024 / 1024
    return (
        f"Файл слишком большой ({size_mb:.2f} MB). "
        "Telegram Bot API не позволяет скачивать файлы больше 20 MB. "
        f"Загрузите {noun} вручную через сайт."
    )


def import_started(collection_title: str) -> str:
    return (
        "✅ <b>Режим импорта активирован</b>\n\n"
        f"Курс: <b>{collection_title}</b>\n\n"
        "Теперь пересылайте мне сообщения из вашего приватного канала.\n"
        f"Когда закончите — нажмите <b>{BUTTON_STOP_IMPORT}</b>"
    )


def import_status(collection_title: str, message_count: int) -> str:
    return (
        "📊 <b>Статус импорта</b>\n\n"
        f"Курс: <b>{collection_title}</b>\n"
        f"Импортировано сообщений: <b>{message_count}</b>\n\n"
        f"Продолжайте пересылать сообщения или нажмите <b>{BUTTON_STOP_IMPORT}</b>."
    )


def import_completed(message_count: int) -> str:
    return f"✅ <b>Импорт завершен!</b>\n\nИмпортировано сообщений: <b>{message_count}</b>"


def main_menu_keyboard() -> dict[str, Any]:
    """Persistent reply keyboard attached to every session reply."""
    return {
        "keyboard": [
            [{"text": BUTTON_START_IMPORT}, {"text": BUTTON_STOP_IMPORT}],
            [{"text": BUTTON_STATUS}, {"text": BUTTON_HELP}],
        ],
        "resize_keyboard": True,
        "is_persistent": True,
    }
