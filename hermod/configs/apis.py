"""
External API endpoints used by Hermod.

The data fetcher Lambdas get these URLs through their environment so the
endpoints can change without touching handler code.
"""

from __future__ import annotations
from urllib.parse import urlencode


class ExternalApis:
    """Public data sources for weather, transit and shared mobility."""

    # Weather (Luxembourg Geoportail, ASTA stations)
    WEATHER_DAILY_JSON = (
        "https://wms.inspire.geoportail.lu/geoserver/mf/wfs?SERVICE=wfs&VERSION=2.0.0&REQUEST=GetFeature"
        "&TYPENAME=MF.PointTimeSeriesObservation_Daily_ASTA_avg_ta200&OUTPUTFORMAT=application/json"
    )
    WEATHER_HOURLY_JSON = (
        "https://wms.inspire.geoportail.lu/geoserver/mf/wfs?SERVICE=wfs&VERSION=2.0.0&REQUEST=GetFeature"
        "&TYPENAME=MF.PointTimeSeriesObservation_Hourly_ASTA_avg_ta200&OUTPUTFORMAT=application/json"
    )
    WEATHER_AIRPORT_CSV = (
        "https://download.data.public.lu/resources/"
        "present-weather-condition-at-luxembourg-airport-ellx-decoded-from-metar-message/"
        "20251129-233205/data-lux-actual.csv"
    )
    WEATHER_METAR_TAF = (
        "https://download.data.public.lu/resources/"
        "aerodrome-reports-and-forecasts-for-luxembourg-airport-ellx/"
        "20251129-233212/data-metar-taf-laf.csv"
    )

    # Transportation
    DATA_PUBLIC_LU_API = "https://data.public.lu/api/1/datasets/"
    FLEX_CARSHARING_PATTERN = "https://download.data.public.lu/resources/flex-carsharing-by-cfl-1/"

    # Bicycle mobility (Vel'OH)
    JCDECAUX_STATIONS = "https://api.jcdecaux.com/vls/v1/stations?contract=luxembourg"

    # Transit
    CFL_GTFS_RT = "https://data.public.lu/en/reuses/gtfs-rt/"
    NETEX_DATA = "https://data.public.lu/en/datasets/horaires-et-arrets-des-transport-publics-netex/"
    SNCF_API = "https://ressources.data.sncf.com/api/explore/v2.1/console"
    DEUTSCHEBAHN_API = "https://developers.deutschebahn.com/db-api-marketplace/apis/start"
    IRAIL_API = "https://docs.irail.be/"

    @classmethod
    def fetcher_env(cls) -> dict[str, str]:
        """Environment variables handed to the data fetcher Lambdas."""
        return {
            "WEATHER_DAILY_URL": cls.WEATHER_DAILY_JSON,
            "WEATHER_HOURLY_URL": cls.WEATHER_HOURLY_JSON,
            "WEATHER_AIRPORT_URL": cls.WEATHER_AIRPORT_CSV,
            "DATA_PUBLIC_LU_API": cls.DATA_PUBLIC_LU_API,
            "JCDECAUX_API": cls.JCDECAUX_STATIONS,
        }


class MobiliteitApi:
    """
    Mobiliteit.lu (HAFAS) URL builder.

    Access IDs are issued on request by opendata-api@atp.etat.lu. Open
    access with attribution; rate limits apply.
    """

    BASE_URL = "https://cdt.hafas.de/opendata/apiserver/"

    def __init__(self, access_id: str) -> None:
        self.access_id = access_id

    def _url(self, endpoint: str, **params) -> str:
        query = urlencode({"accessId": self.access_id, **params, "format": "json"})
        return f"{self.BASE_URL}{endpoint}?{query}"

    def nearby_stops(self, lat: float, lon: float, radius: int = 1000, max_no: int = 50) -> str:
        """
        Build the nearby stops URL.

        Args:
            lat: Latitude
            lon: Longitude
            radius: Search radius in meters
            max_no: Maximum number of results

        Returns:
            Request URL
        """
        return self._url(
            "location.nearbystops",
            originCoordLat=lat,
            originCoordLong=lon,
            r=radius,
            maxNo=max_no,
        )

    def departure_board(self, station_id: str, date: str, time: str, max_journeys: int = 10) -> str:
        """
        Build the departure board URL.

        Args:
            station_id: HAFAS station ID
            date: Date as YYYY-MM-DD
            time: Time as HH:MM
            max_journeys: Maximum number of journeys

        Returns:
            Request URL
        """
        return self._url(
            "departureBoard",
            id=station_id,
            date=date,
            time=time,
            maxJourneys=max_journeys,
        )
