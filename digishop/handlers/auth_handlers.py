# digishop/handlers/auth_handlers.py
from telegram import Update
from telegram.ext import ContextTypes, ConversationHandler
from .base_handler import BaseHandler
from ..constants import (
    LOGIN_EMAIL, LOGIN_PASSWORD, PENDING_EMAIL, PENDING_FULL_NAME,
    REGISTER_EMAIL, REGISTER_NAME, REGISTER_PASSWORD,
)
from ..errors import AuthenticationError, BackendError, ValidationError
from ..services.auth_service import MIN_PASSWORD_LENGTH, AuthService

class AuthHandler(BaseHandler):
    """Sign up, sign in and sign out"""
    def __init__(self, db, sessions):
        super().__init__(db, sessions)
        self.auth_service = AuthService(db)

    async def start_register(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Start the sign-up conversation"""
        if self.current_session(update):
            await self.send_home(update, "You are already signed in.")
            return ConversationHandler.END

        await self.reply(update, "📝 Create Account\n\nWhat is your full name?",
                         reply_markup=self.keyboards.cancel_keyboard())
        return REGISTER_NAME

    async def handle_register_name(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Receive the full name"""
        context.user_data[PENDING_FULL_NAME] = update.message.text.strip()
        await update.message.reply_text("📧 Your email address?",
                                        reply_markup=self.keyboards.cancel_keyboard())
        return REGISTER_EMAIL

    async def handle_register_email(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Receive the email"""
        context.user_data[PENDING_EMAIL] = update.message.text.strip()
        await update.message.reply_text(
            f"🔒 Choose a password (at least {MIN_PASSWORD_LENGTH} characters).\n"
            "Your message will be deleted right away.",
            reply_markup=self.keyboards.cancel_keyboard()
        )
        return REGISTER_PASSWORD

    async def handle_register_password(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Receive the password and create the account"""
        password = update.message.text
        await self.delete_user_message(update)

        try:
            session = await self.auth_service.sign_up(
                email=context.user_data.get(PENDING_EMAIL, ''),
                password=password,
                full_name=context.user_data.get(PENDING_FULL_NAME, '')
            )
        except (ValidationError, BackendError) as e:
            await update.message.reply_text(
                f"❌ {e}\n\nUse /register to try again."
            )
            context.user_data.pop(PENDING_EMAIL, None)
            context.user_data.pop(PENDING_FULL_NAME, None)
            return ConversationHandler.END

        context.user_data.pop(PENDING_EMAIL, None)
        context.user_data.pop(PENDING_FULL_NAME, None)
        self.sessions.set(update.effective_user.id, session)
        await update.message.reply_text(
            "✅ Account created successfully!",
            reply_markup=self.main_menu_for(update)
        )
        return ConversationHandler.END

    async def start_login(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Start the sign-in conversation"""
        if self.current_session(update):
            await self.send_home(update, "You are already signed in.")
            return ConversationHandler.END

        await self.reply(update, "🔑 Sign In\n\nYour email address?",
                         reply_markup=self.keyboards.cancel_keyboard())
        return LOGIN_EMAIL

    async def handle_login_email(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Receive the email"""
        context.user_data[PENDING_EMAIL] = update.message.text.strip()
        await update.message.reply_text(
            "🔒 Your password? The message will be deleted right away.",
            reply_markup=self.keyboards.cancel_keyboard()
        )
        return LOGIN_PASSWORD

    async def handle_login_password(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Receive the password and sign in"""
        password = update.message.text
        await self.delete_user_message(update)
        email = context.user_data.pop(PENDING_EMAIL, '')

        try:
            session = await self.auth_service.sign_in(email, password)
        except (AuthenticationError, BackendError) as e:
            await update.message.reply_text(f"❌ {e}\n\nUse /login to try again.")
            return ConversationHandler.END

        self.sessions.set(update.effective_user.id, session)
        name = session.profile.display_name if session.profile else session.email
        await update.message.reply_text(
            f"👋 Welcome back, {name}!",
            reply_markup=self.main_menu_for(update)
        )
        return ConversationHandler.END

    async def logout(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Drop the session"""
        if self.sessions.clear(update.effective_user.id):
            self.logger.info(f"Chat user {update.effective_user.id} signed out")
        await self.send_home(update, "👋 You have been signed out.")
