# digishop/handlers/base_handler.py
import logging
from typing import Optional
from telegram import InlineKeyboardMarkup, Update
from telegram.error import BadRequest, TelegramError
from telegram.ext import ContextTypes, ConversationHandler
from ..services.session import Session, SessionStore
from ..utils.formatters import fit_message
from ..utils.keyboards import Keyboards
from ..utils.messages import Messages

class BaseHandler:
    """Base class for handlers"""
    def __init__(self, db, sessions: SessionStore):
        self.db = db
        self.sessions = sessions
        self.keyboards = Keyboards()
        self.messages = Messages()
        self.logger = logging.getLogger(self.__class__.__module__)

    def current_session(self, update: Update) -> Optional[Session]:
        """Session of the chat user behind an update"""
        return self.sessions.get(update.effective_user.id)

    async def reply(self, update: Update, text: str,
                    reply_markup: Optional[InlineKeyboardMarkup] = None):
        """Edit the pressed message, or answer a typed one"""
        text = fit_message(text)
        query = update.callback_query
        if query:
            await query.answer()
            try:
                await query.edit_message_text(text, reply_markup=reply_markup)
            except BadRequest as e:
                # Pressing the button of the screen already shown
                if "not modified" not in str(e).lower():
                    raise
        else:
            await update.effective_message.reply_text(text, reply_markup=reply_markup)

    def main_menu_for(self, update: Update) -> InlineKeyboardMarkup:
        session = self.current_session(update)
        return self.keyboards.main_menu(
            signed_in=session is not None,
            is_admin=bool(session and session.is_admin)
        )

    async def send_login_prompt(self, update: Update):
        """Send the user to sign in"""
        await self.reply(update, self.messages.LOGIN_REQUIRED,
                         reply_markup=self.keyboards.main_menu())

    async def send_home(self, update: Update, text: Optional[str] = None):
        """Send the user back to the home screen"""
        await self.reply(update, text or self.messages.WELCOME,
                         reply_markup=self.main_menu_for(update))

    async def delete_user_message(self, update: Update):
        """Remove a message that carried a secret"""
        try:
            await update.message.delete()
        except TelegramError as e:
            self.logger.warning(f"Could not delete message: {e}")

    @staticmethod
    async def cancel_conversation(update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Cancel the running conversation"""
        context.user_data.clear()
        if update.callback_query:
            await update.callback_query.answer()
            await update.callback_query.edit_message_text("❌ Cancelled.")
        else:
            await update.message.reply_text("❌ Cancelled.")
        return ConversationHandler.END
