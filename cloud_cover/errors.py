"""Exceptions raised by Cloud Cover Forecast."""


class CloudCoverError(Exception):
    """Base class for all package errors."""


class InvalidCoordinatesError(CloudCoverError, ValueError):
    """Latitude/longitude outside the valid range."""

    def __init__(self, lat, lon):
        self.lat = lat
        self.lon = lon
        super().__init__(
            f"Invalid coordinates ({lat}, {lon}). Must be between -90 and 90 for "
            f"latitude, and -180 and 180 for longitude."
        )


class MalformedResponseError(CloudCoverError, ValueError):
    """Provider returned JSON without the fields we need."""

    def __init__(self, provider: str, detail: str = "Malformed API response"):
        self.provider = provider
        super().__init__(f"{provider}: {detail}")


class ForecastUnavailableError(CloudCoverError):
    """The primary forecast could not be fetched."""


class LocationNotFoundError(CloudCoverError):
    """Geocoding returned no match."""


class PhotographyInputError(CloudCoverError, ValueError):
    """Photography times requested without a usable sunrise/sunset pair."""


class LocationServiceError(CloudCoverError):
    """The geocoding service could not be reached."""
