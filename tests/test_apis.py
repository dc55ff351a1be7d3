"""
Tests for the external API catalog
"""
from urllib.parse import parse_qs, urlparse

from hermod.configs.apis import ExternalApis, MobiliteitApi


def query(url):
    return {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}


def test_fetcher_env():
    env = ExternalApis.fetcher_env()

    assert env == {
        "WEATHER_DAILY_URL": ExternalApis.WEATHER_DAILY_JSON,
        "WEATHER_HOURLY_URL": ExternalApis.WEATHER_HOURLY_JSON,
        "WEATHER_AIRPORT_URL": ExternalApis.WEATHER_AIRPORT_CSV,
        "DATA_PUBLIC_LU_API": ExternalApis.DATA_PUBLIC_LU_API,
        "JCDECAUX_API": ExternalApis.JCDECAUX_STATIONS,
    }
    assert all(url.startswith("https://") for url in env.values())


def test_nearby_stops_url():
    url = MobiliteitApi("KEY").nearby_stops(49.6, 6.13)

    assert url.startswith("https://cdt.hafas.de/opendata/apiserver/location.nearbystops?")
    assert query(url) == {
        "accessId": "KEY",
        "originCoordLat": "49.6",
        "originCoordLong": "6.13",
        "r": "1000",
        "maxNo": "50",
        "format": "json",
    }


def test_departure_board_url():
    url = MobiliteitApi("KEY").departure_board("200405060", "2025-01-31", "08:15", max_journeys=5)

    assert urlparse(url).path == "/opendata/apiserver/departureBoard"
    assert query(url) == {
        "accessId": "KEY",
        "id": "200405060",
        "date": "2025-01-31",
        "time": "08:15",
        "maxJourneys": "5",
        "format": "json",
    }
