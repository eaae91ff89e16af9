import base64
import datetime
from io import BytesIO

import pytest
from PIL import Image

from dailyreports.entry import Entry
from dailyreports.store import LocalStore


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path / "media"
    return settings.MEDIA_ROOT


@pytest.fixture
def local_store(tmp_path):
    return LocalStore(tmp_path / "entries.json")


def png_bytes(size=(20, 20), color=(200, 30, 30, 255)):
    buffer = BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_data_url():
    return "data:image/png;base64," + base64.b64encode(png_bytes()).decode("ascii")


@pytest.fixture
def entry():
    report = Entry(
        date=datetime.date(2024, 3, 5),
        site="Prime 11 Unit 213",
        area="Kitchen",
        weather="Partly cloudy, 31°C",
        obstacles="Lift out of service",
        notes="Tiles delivered",
        manpower="2 electricians, 3 masons",
        safety_incidents="None",
    )
    report.set_progress("Demolition", 80)
    report.set_progress("Electrical", 35)
    return report


@pytest.fixture
def make_png():
    return png_bytes
