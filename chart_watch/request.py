"""
Chart release requests and chart values schemas

Values are validated against the schema registered for the chart when the
request is built, so malformed values fail before reaching the engine.
"""

from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type, Union

import pulumi
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ChartValues(BaseModel):
    """Values tree passed to a chart.

    Unknown keys are kept as-is, Pulumi outputs are allowed as leaves.
    Subclass it to describe the values of a specific chart.
    """

    model_config = ConfigDict(
        extra="allow", arbitrary_types_allowed=True, populate_by_name=True, frozen=True
    )


_VALUES_SCHEMAS: Dict[str, Type[ChartValues]] = {}


def register_values_schema(chart: str, schema: Type[ChartValues]) -> Type[ChartValues]:
    """Validate values of chart with schema from now on"""
    if not issubclass(schema, ChartValues):
        raise TypeError(f"{schema!r} is not a ChartValues subclass")
    _VALUES_SCHEMAS[chart] = schema
    return schema


def values_schema_for(chart: str) -> Type[ChartValues]:
    return _VALUES_SCHEMAS.get(chart, ChartValues)


class ChartRequest(BaseModel):
    """Deploy chart at version from repo with values into namespace"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    chart: str = Field(min_length=1)
    version: Optional[str] = None
    repo: Optional[str] = None
    namespace: Optional[Union[str, pulumi.Output]] = None
    values: ChartValues = Field(default_factory=ChartValues)
    api_versions: Tuple[str, ...] = ()
    transformations: Tuple[Callable[..., Any], ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _validate_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        values = data.get("values")
        schema = values_schema_for(data.get("chart", ""))
        if isinstance(values, schema):
            return data
        if isinstance(values, ChartValues):
            values = values.model_dump(by_alias=True, exclude_unset=True)
        return {**data, "values": schema.model_validate(values or {})}

    @field_validator("version")
    @classmethod
    def _check_version(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("version must not be empty")
        return v

    @field_validator("repo")
    @classmethod
    def _check_repo(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"repo must be an http(s) URL, got '{v}'")
        return v.rstrip("/")

    @property
    def check_freshness(self) -> bool:
        return self.repo is not None and self.version is not None

    def values_tree(self) -> Dict[str, Any]:
        return self.values.model_dump(by_alias=True, exclude_unset=True)

    @classmethod
    def from_config(cls, entry: Mapping[str, Any], **overrides: Any) -> "ChartRequest":
        """Build a request from a 'charts' stack config entry"""
        data = {
            "chart": entry.get("chart"),
            "version": entry.get("version"),
            "repo": entry.get("repo"),
            "namespace": entry.get("namespace"),
            "values": entry.get("values") or {},
            "api_versions": tuple(entry.get("apiVersions") or ()),
        }
        data.update(overrides)
        return cls(**data)
