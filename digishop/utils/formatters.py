# digishop/utils/formatters.py
from datetime import datetime
import pytz
from decimal import Decimal
from ..config import Config

def format_price(amount: Decimal) -> str:
    """Price with currency symbol and two decimals"""
    return f"{Config.CURRENCY_SYMBOL}{amount:,.2f}"

def format_datetime(dt: datetime) -> str:
    """Date and time in the configured timezone"""
    tz = pytz.timezone(Config.TIMEZONE)
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(tz).strftime("%Y-%m-%d %H:%M")

def format_date(dt: datetime) -> str:
    """Long date, e.g. 'March 5, 2024'"""
    tz = pytz.timezone(Config.TIMEZONE)
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    local = dt.astimezone(tz)
    return f"{local.strftime('%B')} {local.day}, {local.year}"

def truncate(text: str, length: int = 120) -> str:
    """Cut long text at a word boundary"""
    if len(text) <= length:
        return text
    return text[:length].rsplit(' ', 1)[0] + "…"

MESSAGE_LIMIT = 4096

def fit_message(text: str, limit: int = MESSAGE_LIMIT) -> str:
    """Keep a reply within Telegram's message size"""
    if len(text) <= limit:
        return text
    return text[:limit - 1] + "…"
