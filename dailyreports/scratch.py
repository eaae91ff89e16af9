import logging
import threading
from contextlib import contextmanager

from .exceptions import RenderTargetUnavailable
from .layout import Layout

logger = logging.getLogger(__name__)


class RenderTarget:
    """
    The scratch area a layout is placed in while it is being exported.

    One export owns it at a time: `swap()` holds the lock until the original
    content has been put back, so concurrent exports run one after another.
    """

    def __init__(self, content=None, mounted=True):
        self._content = content if content is not None else Layout()
        self._mounted = mounted
        self._lock = threading.Lock()

    @property
    def mounted(self):
        return self._mounted

    def mount(self):
        self._mounted = True

    def unmount(self):
        self._mounted = False

    @property
    def content(self):
        if not self._mounted:
            raise RenderTargetUnavailable("Render target is not mounted.")
        return self._content

    @contextmanager
    def swap(self, layout):
        """Temporarily replace the target's content; always restore it."""
        with self._lock:
            if not self._mounted:
                raise RenderTargetUnavailable("Render target is not mounted.")
            original = self._content
            self._content = layout
            try:
                yield self
            finally:
                self._content = original
                logger.debug("Render target restored (%d blocks)", len(original))


default_target = RenderTarget()
