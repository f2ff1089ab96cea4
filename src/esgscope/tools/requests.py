"""
Typed tool requests.

Every tool has its own frozen pydantic model. ``parse_request`` turns the
loosely typed parameter mapping received from the transport into one of
these, so handlers only ever see clean values. The same models describe the
parameters advertised in the capabilities listing.
"""

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from esgscope.errors import ValidationError

# JSON schema types as advertised to callers
PARAMETER_TYPES = {
    "string": "string",
    "integer": "number",
    "number": "number",
}


class ToolRequest(BaseModel):
    """Base for tool inputs."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def reject_booleans(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("booleans are not accepted")
        return value


class GetCompaniesRequest(ToolRequest):
    pass


class GetCompanyBySymbolRequest(ToolRequest):
    symbol: str = Field(description="Stock symbol (e.g., AAPL, TSLA)")


class GetEsgPerformersRequest(ToolRequest):
    count: int = Field(default=5, ge=0, description="Number of companies to return (default: 5)")


class AnalyzeCompanyRequest(ToolRequest):
    symbol: str = Field(description="Stock symbol of company to analyze")


class GetCompaniesByRiskRequest(ToolRequest):
    risk_level: str = Field(alias="riskLevel", description="Risk level: Low, Medium, High")


class GetCompaniesByIndustryRequest(ToolRequest):
    industry: str = Field(description="Industry name (e.g., Technology, Healthcare)")


class GetMarketAnalyticsRequest(ToolRequest):
    pass


def describe_parameters(request_type: type[ToolRequest]) -> dict:
    """Parameter descriptors for the capabilities listing, keyed by wire name."""
    schema = request_type.model_json_schema()
    required = set(schema.get("required", ()))

    described = {}
    for name, prop in schema.get("properties", {}).items():
        entry = {
            "type": PARAMETER_TYPES.get(prop.get("type"), prop.get("type")),
            "description": prop.get("description"),
            "required": name in required,
        }
        if "default" in prop:
            entry["default"] = prop["default"]
        described[name] = entry
    return described


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _lookup(parameters: Mapping[str, Any], name: str) -> Any:
    if name in parameters:
        return parameters[name]
    # Fall back to a case-insensitive match ("RiskLevel", "SYMBOL", ...)
    for key, value in parameters.items():
        if isinstance(key, str) and key.lower() == name.lower():
            return value
    return None


def _to_validation_error(error: PydanticValidationError) -> ValidationError:
    first = error.errors()[0]
    parameter = str(first["loc"][0]) if first["loc"] else None
    if first["type"] == "missing":
        return ValidationError(f"{parameter} parameter is required", parameter=parameter)
    return ValidationError(
        f"{parameter} parameter is invalid: {first['msg']}, got '{first.get('input')}'",
        parameter=parameter,
    )


def parse_request(request_type: type[ToolRequest], values: Optional[Mapping[str, Any]]):
    """
    Validate raw values and build the tool's request model.

    Blank values count as missing, so optional parameters fall back to their
    defaults and required ones are reported as missing.

    Raises:
        ValidationError: a required parameter is missing or a value
            cannot be coerced to its declared type
    """
    if values is None:
        values = {}
    if not isinstance(values, Mapping):
        raise ValidationError("Parameters must be an object")

    data = {}
    for name, field in request_type.model_fields.items():
        key = field.alias or name
        raw = _lookup(values, key)
        if _is_blank(raw):
            continue
        data[key] = raw.strip() if isinstance(raw, str) else raw

    try:
        return request_type.model_validate(data)
    except PydanticValidationError as e:
        raise _to_validation_error(e) from None
