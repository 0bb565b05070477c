"""json-server-sync: keep paginated REST resources in sync with a view-model.

Public surface:

1. ``ResourceClient`` / ``ResourceClientFactory`` talk to the REST backend
2. ``ResourceSynchronizer`` pages, merges and reflects state into a target
3. Errors live in ``jsonsync.errors``
"""

from .client.resource_client import ResourceClient, ResourceClientFactory
from .errors import ConfigurationError, ExhaustedPaginationError, JsonSyncError, RequestError
from .sync.models import SynchronizerConfig, SyncState, TriggerConfig
from .sync.synchronizer import ResourceSynchronizer, create_instance
from .sync.trigger import ChangeNotifier

__all__ = [
    "ChangeNotifier",
    "ConfigurationError",
    "ExhaustedPaginationError",
    "JsonSyncError",
    "RequestError",
    "ResourceClient",
    "ResourceClientFactory",
    "ResourceSynchronizer",
    "SyncState",
    "SynchronizerConfig",
    "TriggerConfig",
    "create_instance",
]
