# agricloud/errors.py


class AgriCloudError(Exception):
    """Base class for every error raised by the farm monitoring core."""


class ProviderUnavailable(AgriCloudError):
    """Weather or history provider could not deliver usable data."""

    def __init__(self, provider: str, detail: str):
        super().__init__(f"{provider} unavailable: {detail}")
        self.provider = provider
        self.detail = detail


class SoilUnavailable(AgriCloudError):
    """Soil provider failed or had no layer for the coordinate.

    Never leaves the aggregator: it is replaced by a simulated sample.
    """


class InvalidTransition(AgriCloudError):
    def __init__(self, current: str, attempted: str):
        super().__init__(f"cannot {attempted} irrigation while {current}")
        self.current = current
        self.attempted = attempted


class AdvisoryError(AgriCloudError):
    """Terminal failure of an advisory prediction."""


class InsufficientForecast(AdvisoryError):
    def __init__(self, field: str, available: int, required: int):
        super().__init__(f"forecast '{field}' has {available} entries, {required} required")
        self.field = field
        self.available = available
        self.required = required


class OracleUnavailable(AdvisoryError):
    pass


class AdvisoryValidationError(AdvisoryError):
    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = errors or []


class FarmNotFound(AgriCloudError):
    def __init__(self, farm_id: str):
        super().__init__(f"farm {farm_id} not found")
        self.farm_id = farm_id


class FarmOwnershipError(AgriCloudError):
    def __init__(self, farm_id: str):
        super().__init__(f"farm {farm_id} cannot change owner")
        self.farm_id = farm_id
