"""Network title lookup for shared links."""

from share_mail.web.fetcher import TitleFetcher, extract_title

__all__ = ["TitleFetcher", "extract_title"]
