# digishop/bot.py
import asyncio
import logging
import signal
from typing import Optional
from telegram import BotCommand, Update
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    filters
)
from .config import Config
from .constants import (
    EDIT_FULL_NAME, LOGIN_EMAIL, LOGIN_PASSWORD, REGISTER_EMAIL,
    REGISTER_NAME, REGISTER_PASSWORD, WAITING_CATEGORY_FORM, WAITING_PRODUCT_FORM,
)
from .database import Database
from .handlers import (
    AccountHandler,
    AdminHandler,
    AuthHandler,
    BaseHandler,
    CallbackHandler,
    CheckoutHandler,
    UserHandler
)
from .services.session import SessionStore

BOT_COMMANDS = [
    BotCommand("start", "Home and featured products"),
    BotCommand("products", "Browse all products"),
    BotCommand("search", "Search products"),
    BotCommand("account", "Your orders and profile"),
    BotCommand("login", "Sign in"),
    BotCommand("register", "Create an account"),
    BotCommand("logout", "Sign out"),
    BotCommand("about", "About the shop"),
]

TEXT = filters.TEXT & ~filters.COMMAND

class DigitalShopBot:
    def __init__(self, db: Optional[Database] = None):
        """Build the application and wire the handlers"""
        self.logger = logging.getLogger(__name__)
        self.db = db or Database()
        self.sessions = SessionStore()
        self._stop_event = asyncio.Event()

        self.user_handler = UserHandler(self.db, self.sessions)
        self.auth_handler = AuthHandler(self.db, self.sessions)
        self.account_handler = AccountHandler(self.db, self.sessions)
        self.checkout_handler = CheckoutHandler(self.db, self.sessions)
        self.admin_handler = AdminHandler(self.db, self.sessions)
        self.callback_handler = CallbackHandler(
            self.db, self.sessions,
            user=self.user_handler,
            checkout=self.checkout_handler,
            account=self.account_handler,
            auth=self.auth_handler,
            admin=self.admin_handler
        )

        self.application = (
            Application.builder()
            .token(Config.TELEGRAM_TOKEN)
            .build()
        )
        self.setup_handlers()

    def _fallbacks(self):
        return [
            CommandHandler('cancel', BaseHandler.cancel_conversation),
            CallbackQueryHandler(BaseHandler.cancel_conversation, pattern='^cancel$')
        ]

    def setup_handlers(self):
        """Register the bot handlers"""
        auth = self.auth_handler
        account = self.account_handler
        admin = self.admin_handler
        user = self.user_handler
        checkout = self.checkout_handler

        # Conversations first, they own their entry buttons
        self.application.add_handler(ConversationHandler(
            entry_points=[
                CommandHandler('register', auth.start_register),
                CallbackQueryHandler(auth.start_register, pattern='^register$')
            ],
            states={
                REGISTER_NAME: [MessageHandler(TEXT, auth.handle_register_name)],
                REGISTER_EMAIL: [MessageHandler(TEXT, auth.handle_register_email)],
                REGISTER_PASSWORD: [MessageHandler(TEXT, auth.handle_register_password)],
            },
            fallbacks=self._fallbacks()
        ))
        self.application.add_handler(ConversationHandler(
            entry_points=[
                CommandHandler('login', auth.start_login),
                CallbackQueryHandler(auth.start_login, pattern='^login$')
            ],
            states={
                LOGIN_EMAIL: [MessageHandler(TEXT, auth.handle_login_email)],
                LOGIN_PASSWORD: [MessageHandler(TEXT, auth.handle_login_password)],
            },
            fallbacks=self._fallbacks()
        ))
        self.application.add_handler(ConversationHandler(
            entry_points=[CallbackQueryHandler(account.start_edit_profile, pattern='^edit_profile$')],
            states={
                EDIT_FULL_NAME: [MessageHandler(TEXT, account.handle_full_name)],
            },
            fallbacks=self._fallbacks()
        ))
        self.application.add_handler(ConversationHandler(
            entry_points=[
                CallbackQueryHandler(admin.start_add_product, pattern='^admin_add_product$'),
                CallbackQueryHandler(admin.start_edit_product, pattern='^admin_edit:')
            ],
            states={
                WAITING_PRODUCT_FORM: [MessageHandler(TEXT, admin.handle_product_form)],
            },
            fallbacks=self._fallbacks()
        ))
        self.application.add_handler(ConversationHandler(
            entry_points=[CallbackQueryHandler(admin.start_add_category, pattern='^admin_add_category$')],
            states={
                WAITING_CATEGORY_FORM: [MessageHandler(TEXT, admin.handle_category_form)],
            },
            fallbacks=self._fallbacks()
        ))

        # Commands
        self.application.add_handler(CommandHandler("start", user.start))
        self.application.add_handler(CommandHandler("products", user.show_catalog))
        self.application.add_handler(CommandHandler("product", user.show_product))
        self.application.add_handler(CommandHandler("search", user.search))
        self.application.add_handler(CommandHandler("about", user.about))
        self.application.add_handler(CommandHandler("buy", checkout.start_checkout))
        self.application.add_handler(CommandHandler("account", account.show_account))
        self.application.add_handler(CommandHandler("admin", admin.admin_panel))
        self.application.add_handler(CommandHandler("logout", auth.logout))

        # Remaining buttons
        self.application.add_handler(CallbackQueryHandler(self.callback_handler.handle_callback))

        # Free text searches the catalog
        self.application.add_handler(MessageHandler(TEXT, user.handle_message))

        self.application.add_error_handler(self.on_error)

    async def on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        """Log errors no handler dealt with and tell the user"""
        self.logger.error("Unhandled error while processing an update", exc_info=context.error)
        if isinstance(update, Update) and update.effective_message:
            await update.effective_message.reply_text(
                "❌ Something went wrong. Please try again."
            )

    def stop(self):
        """Ask a running bot to shut down"""
        self._stop_event.set()

    async def start(self):
        """Connect to the backend and poll until stopped"""
        await self.db.connect()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
            except NotImplementedError:
                # Windows event loops have no signal handlers
                pass

        try:
            async with self.application:
                await self.application.bot.set_my_commands(BOT_COMMANDS)
                await self.application.start()
                await self.application.updater.start_polling()
                self.logger.info("Bot is polling for updates")

                await self._stop_event.wait()

                self.logger.info("Stopping bot...")
                await self.application.updater.stop()
                await self.application.stop()
        finally:
            await self.db.close()
