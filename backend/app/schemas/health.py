"""Health check schemas."""

from pydantic import Field

from common.utils.json_model import JsonModel


class HealthCheckResponse(JsonModel):
    """Health check response."""

    status: str = Field(..., description="Service health status")
    service: str = Field(..., description="Service name")
    environment: str = Field(..., description="Environment name")
    use_mock_cognito: bool = Field(..., description="Whether mock Cognito is enabled")
    payments_configured: bool = Field(..., description="Whether payment provider keys are present")
    database_type: str = Field(..., description="Database dialect (sqlite/postgresql)")
