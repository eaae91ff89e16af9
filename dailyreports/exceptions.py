class DailyReportError(Exception):
    """Base class for daily report failures."""


class RenderTargetUnavailable(DailyReportError):
    """The scratch render target is not mounted, so nothing can be exported."""


class UploadFailure(DailyReportError):
    """A photo or entry could not be written to the persistence backend."""


class LookupFailure(DailyReportError):
    """Weather or geolocation lookup failed."""
