"""Pydantic models for synchronizer configuration and state."""

from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TriggerConfig(BaseModel):
    """Describes which value to watch and what to do when it changes."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    source: Any = Field(..., description="Object exposing subscribe(callback) -> subscription")
    expression: str = Field(default="query", description="Target field holding the watched value")
    load_one: bool = Field(default=False, description="Call load_one() instead of load() on change")
    custom_callback: Optional[Callable[[Any], Any]] = Field(
        default=None, description="Called with the new value instead of any load"
    )

    @field_validator("source")
    @classmethod
    def _source_is_subscribable(cls, value: Any) -> Any:
        if not callable(getattr(value, "subscribe", None)):
            raise ValueError("trigger source must expose a subscribe(callback) method")
        return value


class SynchronizerConfig(BaseModel):
    """Options for a ResourceSynchronizer; immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    page_size: int = Field(default=10, gt=0)
    collection_field_name: str = Field(default="resource", min_length=1)
    instance_field_name: str = Field(default="instance", min_length=1)
    default_query: Dict[str, Any] = Field(default_factory=dict)
    on_load: Optional[Callable[[Any], Any]] = None
    on_load_error: Optional[Callable[[Any], Any]] = None
    trigger: Optional[TriggerConfig] = None
    reject_on_error: bool = Field(
        default=False, description="Raise RequestError instead of returning its payload"
    )


class SyncState(BaseModel):
    """Snapshot of everything a synchronizer has written into its target."""

    items: List[Any] = Field(default_factory=list)
    instance: Any = None
    current_page: int = 0
    is_loading: bool = False
    is_loading_error: bool = False
    is_fully_loaded: bool = False
