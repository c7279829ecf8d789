"""Unified exception hierarchy for share-mail."""


class ShareMailError(Exception):
    """Base exception for all share-mail errors."""


# Configuration
class ConfigError(ShareMailError):
    """Invalid or unreadable configuration value."""


# Web
class TitleFetchError(ShareMailError):
    """A page title request was refused or failed."""


# Share flow
class ShareError(ShareMailError):
    """Base exception for share operations."""


class ShareInProgressError(ShareError):
    """Another share operation is already running."""


class MissingRecipientError(ShareError):
    """No recipient address is configured for the requested slot."""


class MissingMailTargetError(ShareError):
    """No default email app has been chosen."""


class MailTargetUnavailableError(ShareError):
    """The chosen email app is no longer installed or cannot handle the share."""


class DispatchError(ShareError):
    """The host failed to hand the draft to the email app."""
