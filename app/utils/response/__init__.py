from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ApiResponse(BaseModel):
    """Success envelope shared by every endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(alias="statusCode")
    data: Any = None
    message: str = "Success"
    success: bool = True

    @model_validator(mode="after")
    def _derive_success(self) -> "ApiResponse":
        self.success = self.status_code < 400
        return self


__all__ = ["ApiResponse"]
