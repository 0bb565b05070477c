"""Resource synchronizer: paginated loads merged into a caller-owned target.

The synchronizer writes into the target by field name:

- ``config.collection_field_name`` holds the loaded items
- ``config.instance_field_name`` holds the item fetched by ``load_one``
- ``current_page``, ``is_loading``, ``is_loading_error`` and
  ``is_fully_loaded`` reflect the paging state

Request failures never raise out of ``load``/``load_one`` (unless
``reject_on_error`` is set): the error payload is returned, the
``is_loading_error`` flag is raised and ``on_load_error`` is called.
Misconfiguration and paging past the last page do raise.

Overlapping calls on one instance are not fenced; the last response to
arrive wins.
"""

from collections.abc import Mapping
from copy import deepcopy
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from jsonsync.client.resource_client import UNION_KEY
from jsonsync.errors import ConfigurationError, ExhaustedPaginationError, RequestError
from jsonsync.sync.models import SyncState, SynchronizerConfig
from jsonsync.sync.target import get_field, set_field
from jsonsync.sync.union import union
from jsonsync.utils.logging import get_logger

logger = get_logger(__name__)

CURRENT_PAGE = "current_page"
IS_LOADING = "is_loading"
IS_LOADING_ERROR = "is_loading_error"
IS_FULLY_LOADED = "is_fully_loaded"

_UNSEEN = object()


def _build_config(config: Union[SynchronizerConfig, Mapping, None]) -> SynchronizerConfig:
    """Merge caller options over the defaults, one key at a time."""
    if config is None:
        return SynchronizerConfig()
    if isinstance(config, SynchronizerConfig):
        return config.model_copy()
    if not isinstance(config, Mapping):
        raise ConfigurationError(f"Synchronizer config must be a mapping, got {type(config).__name__}")
    try:
        return SynchronizerConfig(**dict(config))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid synchronizer config: {e}") from e


class ResourceSynchronizer:
    """Keeps one collection (and one instance slot) of a target in sync with a resource."""

    def __init__(self, client: Any, target: Any, config: Union[SynchronizerConfig, Mapping, None] = None):
        if client is None or target is None:
            raise ConfigurationError("ResourceSynchronizer requires a client and a target")
        self.client = client
        self.target = target
        self.config = _build_config(config)
        self._last_trigger_value: Any = _UNSEEN
        self._subscription = None

        set_field(self.target, CURRENT_PAGE, 0)

        trigger = self.config.trigger
        if trigger is not None:
            self._subscription = trigger.source.subscribe(self._check_trigger)
            logger.debug(f"Watching target field '{trigger.expression}'")

    def load(
        self,
        query: Optional[Dict[str, Any]] = None,
        page: int = 0,
        page_size: Optional[int] = None,
    ) -> Any:
        """
        Load one page of the resource into the target.

        Args:
            query: Filters merged over ``default_query``; ``union=True`` merges
                the page into the current collection instead of replacing it
            page: The page to load
            page_size: Defaults to ``config.page_size``

        Returns:
            The loaded items, or the error payload when the request failed
        """
        if query is not None and not isinstance(query, Mapping):
            raise ConfigurationError(f"query must be a mapping, got {type(query).__name__}")
        if page_size is None:
            page_size = self.config.page_size

        set_field(self.target, IS_LOADING, True)
        try:
            merged_query = {**self.config.default_query, **(query or {})}
            set_field(self.target, IS_FULLY_LOADED, False)
            set_field(self.target, IS_LOADING_ERROR, False)

            try:
                response = self.client.find(merged_query, page=page, page_size=page_size)
            except RequestError as e:
                return self._handle_error(e)

            collection_field = self.config.collection_field_name
            if merged_query.get(UNION_KEY):
                loaded = get_field(self.target, collection_field) or []
                set_field(self.target, collection_field, union(loaded, response.items))
            else:
                set_field(self.target, collection_field, response.items)
                set_field(self.target, CURRENT_PAGE, 0)

            total_count = response.total_count
            if total_count is not None and page * page_size + page_size >= total_count:
                set_field(self.target, IS_FULLY_LOADED, True)
                logger.debug(f"All {total_count} items of '{collection_field}' loaded")

            if self.config.on_load:
                self.config.on_load(response)
            return response.items
        finally:
            set_field(self.target, IS_LOADING, False)

    def load_more(self, query: Optional[Dict[str, Any]] = None, page_size: Optional[int] = None) -> Any:
        """
        Load the next page and merge it into the collection.

        Raises:
            ExhaustedPaginationError: If every page has already been loaded
        """
        query = {**(query or {}), UNION_KEY: True}
        if get_field(self.target, IS_FULLY_LOADED):
            logger.info(f"No more '{self.config.collection_field_name}' to load")
            raise ExhaustedPaginationError()

        next_page = (get_field(self.target, CURRENT_PAGE) or 0) + 1
        set_field(self.target, CURRENT_PAGE, next_page)
        return self.load(query, next_page, page_size)

    def load_one(self, item_id: Any) -> Any:
        """
        Load a single item into the target's instance field.

        Returns:
            The item, or the error payload when the request failed
        """
        set_field(self.target, IS_LOADING, True)
        try:
            set_field(self.target, IS_LOADING_ERROR, False)
            try:
                item = self.client.find_one(item_id)
            except RequestError as e:
                return self._handle_error(e)

            set_field(self.target, self.config.instance_field_name, item)
            if self.config.on_load:
                self.config.on_load(item)
            return item
        finally:
            set_field(self.target, IS_LOADING, False)

    def _handle_error(self, error: RequestError) -> Any:
        logger.warning(f"Loading '{self.config.collection_field_name}' failed: {error}")
        set_field(self.target, IS_LOADING_ERROR, True)
        if self.config.on_load_error:
            self.config.on_load_error(error.payload)
        if self.config.reject_on_error:
            raise error
        return error.payload

    def on_trigger_value_changed(self, value: Any) -> Any:
        """Route a new trigger value to exactly one action."""
        trigger = self.config.trigger
        if trigger is not None and trigger.custom_callback is not None:
            return trigger.custom_callback(value)
        if trigger is not None and trigger.load_one:
            return self.load_one(value)
        return self.load(value)

    def _check_trigger(self) -> None:
        # The first notification always fires, even for an unset value.
        # A value is only remembered once routing it succeeded.
        value = get_field(self.target, self.config.trigger.expression)
        if self._last_trigger_value is not _UNSEEN and value == self._last_trigger_value:
            return
        seen = deepcopy(value)
        self.on_trigger_value_changed(value)
        self._last_trigger_value = seen

    def snapshot(self) -> SyncState:
        """Copy the synchronizer-managed fields of the target into a SyncState."""
        return SyncState(
            items=list(get_field(self.target, self.config.collection_field_name) or []),
            instance=get_field(self.target, self.config.instance_field_name),
            current_page=get_field(self.target, CURRENT_PAGE) or 0,
            is_loading=bool(get_field(self.target, IS_LOADING)),
            is_loading_error=bool(get_field(self.target, IS_LOADING_ERROR)),
            is_fully_loaded=bool(get_field(self.target, IS_FULLY_LOADED)),
        )

    def close(self) -> None:
        """Release the trigger subscription, if any."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def __enter__(self) -> "ResourceSynchronizer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def create_instance(
    client: Any,
    target: Any,
    config: Union[SynchronizerConfig, Mapping, None] = None,
) -> ResourceSynchronizer:
    """Create a ResourceSynchronizer; see its constructor for the arguments."""
    return ResourceSynchronizer(client, target, config)
