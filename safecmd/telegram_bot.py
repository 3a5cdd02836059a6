"""Telegram front end for the command console.

Runs alongside the interactive console in a background thread, sharing the
same Console (and so the same interpreter, history and error log).

Requires telegram_credentials.py with TELEGRAM_TOKEN from @BotFather.
If not configured, start_telegram() logs a message and returns without error.
"""

import asyncio
import threading

from telegram import Update
from telegram.ext import ApplicationBuilder, ContextTypes, MessageHandler, filters

_MAX_REPLY = 4000  # Telegram rejects messages over 4096 chars


def _log(msg):
    print(msg, flush=True)


def format_reply(ok, output):
    """Text to send back for a console (ok, output) pair."""
    if output is None:
        return ""
    text = output if ok else f"Error: {output}"
    if len(text) > _MAX_REPLY:
        text = text[:_MAX_REPLY] + "\n…"
    return text


def make_handler(console):
    async def _handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Run an incoming Telegram message as a command."""
        text = update.message.text
        if not text:
            return

        user = update.message.from_user
        username = user.first_name or user.username or "unknown"
        source = f"[Telegram:{username}]"

        _log(f"  {source} \"{text}\"")
        # Console.execute blocks for up to its timeout; keep the event loop free
        ok, output = await asyncio.to_thread(console.execute, text, source=source)
        reply = format_reply(ok, output)
        _log(f"  Response: \"{reply}\"")

        if reply:
            await update.message.reply_text(reply)

    return _handle_message


async def _run_bot_async(token, console):
    """Run the Telegram bot polling loop (async)."""
    app = ApplicationBuilder().token(token).build()
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, make_handler(console)))

    await app.initialize()
    await app.updater.start_polling(drop_pending_updates=True)
    await app.start()
    _log("Telegram bot started.")

    # Block forever (until thread is killed as daemon)
    stop_event = asyncio.Event()
    await stop_event.wait()


def _run_bot(token, console):
    """Run the Telegram bot (blocking). Meant to be called in a thread."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    loop.run_until_complete(_run_bot_async(token, console))


def start_telegram(console):
    """Start the Telegram bot in a background daemon thread.

    Returns True if started, False if skipped (no token).
    """
    try:
        from safecmd.telegram_credentials import TELEGRAM_TOKEN as token
    except ImportError:
        _log("No telegram_credentials.py, Telegram disabled.")
        return False

    t = threading.Thread(target=_run_bot, args=(token, console), daemon=True)
    t.start()
    return True
