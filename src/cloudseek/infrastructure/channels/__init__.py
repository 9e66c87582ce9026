from .link_classifier import classify_url, extract_links, extract_password
from .telegram import TelegramChannelSearcher, parse_channel_page

__all__ = [
    "TelegramChannelSearcher",
    "classify_url",
    "extract_links",
    "extract_password",
    "parse_channel_page",
]
