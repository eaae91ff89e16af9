import base64
import logging
import re
from io import BytesIO

import requests
from django.conf import settings
from django.core.files.storage import default_storage
from PIL import Image

logger = logging.getLogger(__name__)

DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]*)?(?P<params>(;[^,;]+)*),(?P<payload>.*)$", re.DOTALL)

ALLOWED_UPLOAD_TYPES = ["image/jpeg", "image/png", "image/jpg"]
MAX_UPLOAD_SIZE = 5 * 1024 * 1024


def data_url_to_bytes(data_url):
    """Decode a data: URL into (bytes, mime). Missing mime defaults to JPEG."""
    match = DATA_URL_RE.match(data_url)
    if not match:
        raise ValueError("Not a data URL")
    mime = match.group("mime") or "image/jpeg"
    payload = match.group("payload")
    if ";base64" in (match.group("params") or ""):
        return base64.b64decode(payload), mime
    return payload.encode("utf-8"), mime


def bytes_to_data_url(data, mime="image/jpeg"):
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def flatten_on_white(image):
    """Composite any transparency onto white so nothing renders as black."""
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        return Image.alpha_composite(background, rgba).convert("RGB")
    return image.convert("RGB")


class ImageSource:
    """
    One photo, wherever it lives: an inline data: URL captured from the form,
    a media-storage URL written on save, or a remote http(s) URL.
    """

    def __init__(self, value):
        self.value = value

    def __eq__(self, other):
        return isinstance(other, ImageSource) and other.value == self.value

    def __hash__(self):
        return hash(self.value)

    def __repr__(self):
        preview = self.value if len(self.value) < 60 else self.value[:57] + "..."
        return f"ImageSource({preview!r})"

    @classmethod
    def from_upload(cls, uploaded_file):
        content_type = getattr(uploaded_file, "content_type", None) or "image/jpeg"
        return cls(bytes_to_data_url(uploaded_file.read(), content_type))

    @property
    def kind(self):
        if self.value.startswith("data:"):
            return "inline"
        if self.value.startswith(settings.MEDIA_URL):
            return "media"
        return "remote"

    @property
    def url(self):
        return self.value

    def read_bytes(self):
        kind = self.kind
        if kind == "inline":
            return data_url_to_bytes(self.value)[0]
        if kind == "media":
            name = self.value[len(settings.MEDIA_URL):]
            with default_storage.open(name, "rb") as fh:
                return fh.read()
        response = requests.get(self.value, timeout=settings.DAILYREPORTS_PHOTO_TIMEOUT)
        response.raise_for_status()
        return response.content

    def open_image(self):
        """Load as an opaque RGB Pillow image."""
        image = Image.open(BytesIO(self.read_bytes()))
        image.load()
        return flatten_on_white(image)
