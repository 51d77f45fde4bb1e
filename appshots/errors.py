class AppshotsError(Exception):
    """Base class for every error raised by appshots."""


class UnknownTargetError(AppshotsError, KeyError):
    """Raised when a screenshot target id is not in the registry."""


class UnknownDeviceModelError(AppshotsError, KeyError):
    """Raised when a device model id is not in the registry."""


class UnreadableImageError(AppshotsError):
    """The uploaded bytes could not be decoded as an image."""

    def __init__(self, message: str = "Unable to read screenshot dimensions. Please upload another screenshot.") -> None:
        super().__init__(message)


class MissingAssetError(AppshotsError):
    """A blob that the caller assumed present is not in the asset store."""


class ExportError(AppshotsError):
    """A capture or packaging step failed; the whole export is aborted."""


class TranslationError(AppshotsError):
    pass
