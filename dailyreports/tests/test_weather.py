from unittest import mock

import pytest
import requests

from dailyreports.exceptions import LookupFailure
from dailyreports.weather import describe_code, fetch_current_weather, weather_text

PAYLOAD = {
    "current": {
        "temperature_2m": 30.6,
        "relative_humidity_2m": 70,
        "apparent_temperature": 34.8,
        "precipitation": 0.0,
        "weather_code": 2,
        "wind_speed_10m": 12.3,
    }
}


def fake_response(payload=PAYLOAD, status=200):
    response = mock.Mock()
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return response


@pytest.mark.parametrize("code, expected", [
    (0, "Clear"),
    (2, "Partly cloudy"),
    (63, "Moderate rain"),
    (95, "Thunderstorm"),
    (4, "Weather"),
    (None, "Weather"),
    ("x", "Weather"),
])
def test_describe_code(code, expected):
    assert describe_code(code) == expected


@mock.patch("dailyreports.weather.requests.get")
def test_fetch_current_weather(mock_get):
    mock_get.return_value = fake_response()

    report = fetch_current_weather(-6.8, 39.28)

    assert report.condition == "Partly cloudy"
    assert report.describe() == "Partly cloudy, 31°C (feels 35°C), humidity 70%, wind 12 km/h"
    params = mock_get.call_args.kwargs["params"]
    assert params["latitude"] == -6.8
    assert "weather_code" in params["current"]


@mock.patch("dailyreports.weather.requests.get")
def test_rain_is_mentioned(mock_get):
    payload = {"current": dict(PAYLOAD["current"], precipitation=1.5, weather_code=61)}
    mock_get.return_value = fake_response(payload)
    assert fetch_current_weather(0, 0).describe().endswith("rain 1.5 mm")


@mock.patch("dailyreports.weather.requests.get")
def test_network_error_raises_lookup_failure(mock_get):
    mock_get.side_effect = requests.ConnectionError("offline")
    with pytest.raises(LookupFailure):
        fetch_current_weather(0, 0)


@mock.patch("dailyreports.weather.requests.get")
def test_http_error_raises_lookup_failure(mock_get):
    mock_get.return_value = fake_response(status=503)
    with pytest.raises(LookupFailure):
        fetch_current_weather(0, 0)


@mock.patch("dailyreports.weather.requests.get")
def test_malformed_payload_raises_lookup_failure(mock_get):
    mock_get.return_value = fake_response({"hourly": {}})
    with pytest.raises(LookupFailure):
        fetch_current_weather(0, 0)


@mock.patch("dailyreports.weather.requests.get")
def test_weather_text_keeps_fallback_on_failure(mock_get):
    mock_get.side_effect = requests.Timeout("slow")
    text, error = weather_text(0, 0, fallback="Sunny, hot")
    assert text == "Sunny, hot"
    assert error == "Weather service unavailable."


@mock.patch("dailyreports.weather.requests.get")
def test_weather_text_success(mock_get):
    mock_get.return_value = fake_response()
    text, error = weather_text(0, 0, fallback="ignored")
    assert text.startswith("Partly cloudy")
    assert error == ""
