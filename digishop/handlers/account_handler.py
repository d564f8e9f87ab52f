# digishop/handlers/account_handler.py
from telegram import Update
from telegram.ext import ContextTypes, ConversationHandler
from .base_handler import BaseHandler
from ..constants import EDIT_FULL_NAME
from ..errors import BackendError, NotFoundError, ValidationError
from ..services.account_service import AccountService

class AccountHandler(BaseHandler):
    """Order history and profile of the signed-in user"""
    def __init__(self, db, sessions):
        super().__init__(db, sessions)
        self.account_service = AccountService(db)

    async def show_account(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Profile panel and order history"""
        session = self.current_session(update)
        if not session:
            await self.send_login_prompt(update)
            return

        try:
            orders = await self.account_service.get_order_history(session.user_id)
        except BackendError as e:
            await self.reply(update, f"❌ Could not load your orders: {e}",
                             reply_markup=self.keyboards.account_menu())
            return

        text = (
            "👤 My Account\n\n"
            + self.messages.format_profile(session.profile, session.email)
            + "\n\n"
            + self.messages.format_order_history(orders)
        )
        await self.reply(update, text, reply_markup=self.keyboards.account_menu())

    async def start_edit_profile(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Ask for a new full name"""
        session = self.current_session(update)
        if not session:
            await self.send_login_prompt(update)
            return ConversationHandler.END

        await self.reply(update, "✏️ Send your new full name:",
                         reply_markup=self.keyboards.cancel_keyboard())
        return EDIT_FULL_NAME

    async def handle_full_name(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Save the full name"""
        session = self.current_session(update)
        if not session:
            await self.send_login_prompt(update)
            return ConversationHandler.END

        try:
            profile = await self.account_service.update_full_name(
                session.user_id, update.message.text
            )
        except (ValidationError, NotFoundError, BackendError) as e:
            await update.message.reply_text(
                f"❌ Failed to update profile: {e}",
                reply_markup=self.keyboards.account_menu()
            )
            return ConversationHandler.END

        self.sessions.update_profile(update.effective_user.id, profile)
        await update.message.reply_text(
            "✅ Profile updated successfully",
            reply_markup=self.keyboards.account_menu()
        )
        return ConversationHandler.END
