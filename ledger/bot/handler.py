from loguru import logger
from telegram import Update
from telegram.constants import ChatType
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from ledger.config import get_settings
from ledger.core.interpreter import HELP_TEXT
from ledger.deps import interpreter
from ledger.models.schemas import IncomingMessage

settings = get_settings()

GROUP_CHATS = (ChatType.GROUP, ChatType.SUPERGROUP)


def to_incoming(update: Update) -> IncomingMessage:
    """Map a Telegram update onto the transport-neutral message."""
    message = update.effective_message
    chat = update.effective_chat
    sender = update.effective_user
    return IncomingMessage(
        conversation_id=str(chat.id),
        sender_id=str(sender.id) if sender else None,
        text=(message.text or message.caption or "").strip(),
        is_from_self=bool(sender and sender.is_bot),
        is_group=chat.type in GROUP_CHATS,
        message_id=str(message.message_id),
    )


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    await update.message.reply_text(
        "Oi! Eu registro os gastos do grupo.\n\n"
        "Mande mensagens como \"uber 29,90\" ou \"paiol 16 e monster 11\".\n\n"
        + HELP_TEXT
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help and /ajuda commands."""
    await update.message.reply_text(HELP_TEXT)


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle incoming text messages, the main conversation entry point."""
    incoming = to_incoming(update)
    if not interpreter.accepts(incoming):
        return
    logger.info("Telegram message in {}: {}", incoming.conversation_id, incoming.text)

    await update.effective_chat.send_action("typing")
    replies = interpreter.handle(incoming)
    for reply in replies:
        await update.effective_message.reply_text(reply)


def build_bot_app() -> Application:
    """Build and return the Telegram bot application."""
    app = Application.builder().token(settings.telegram_bot_token).build()

    app.add_handler(CommandHandler("start", start_command))
    app.add_handler(CommandHandler(["help", "ajuda"], help_command))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))

    return app
