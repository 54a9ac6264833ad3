"""Instance manager — create, delete and look up instances.

Mutations always re-read the index file from disk before writing it back,
never the cache, so a stale cache can't be merged over newer entries. They
don't touch the cache either: cached reads see a change only after
refresh_instances_index().

Ordering, and what a failure leaves behind:
  create: directory -> index entry -> image. A failed index write leaves an
          orphan directory; a failed image copy leaves an indexed instance
          without a cover.
  delete: directory -> index entry. A failed removal leaves the index alone.
Neither case is reconciled automatically.

The index file itself is not locked. Two concurrent mutations both
read-modify-write it and the last writer wins.
"""

import uuid
from pathlib import Path

from .errors import InstanceError, InvalidInputError, NotFoundError
from .logging_config import get_logger
from .state import AppState
from .types import InstanceIndex, InstanceInfo

logger = get_logger(__name__)


def create_instance(state: AppState, name: str, image_path: Path | None = None) -> InstanceInfo:
    """Create an instance directory, index it, and optionally attach a cover image.

    Returns the new entry. If only the image step fails, the raised error
    has ``instance_id`` set: the instance exists and is indexed.
    """
    if not isinstance(name, str):
        raise InvalidInputError(f"Instance name must be a string, got {name!r}")

    store = state.store()
    info = InstanceInfo(id=state.new_id(), name=name, order_index=0)

    store.create(info.id)

    try:
        index = store.load_index()
        index.instances.append(info)
        store.save_index(index)
    except InstanceError:
        logger.warning("Index update failed, leaving orphan directory %s", store.instance_dir(info.id))
        raise

    if image_path is not None:
        try:
            store.attach_image(info.id, Path(image_path))
        except InstanceError as e:
            logger.warning("Instance %s created but image attach failed: %s", info.id, e)
            e.instance_id = info.id
            raise

    logger.info("Created instance %s (%s)", info.id, info.name)
    return info


def delete_instance(state: AppState, instance_id: uuid.UUID) -> None:
    """Remove an instance's directory, then drop it from the index.

    An id already absent from the index is fine; a missing directory is not.
    """
    store = state.store()
    store.delete(instance_id)

    index = store.load_index()
    before = len(index.instances)
    index.instances = [i for i in index.instances if i.id != instance_id]
    store.save_index(index)

    if len(index.instances) == before:
        logger.info("Deleted directory of %s, which had no index entry", instance_id)
    else:
        logger.info("Deleted instance %s", instance_id)


def get_instance_info(state: AppState, instance_id: uuid.UUID) -> InstanceInfo:
    """Look up one instance in the on-disk index, bypassing the cache."""
    info = state.store().load_index().find(instance_id)
    if info is None:
        raise NotFoundError(instance_id)
    return info


def get_instances_index(state: AppState) -> InstanceIndex:
    """Cached index as of the last refresh. No disk I/O."""
    return state.cache.read()


def refresh_instances_index(state: AppState) -> None:
    """Reload the cache from the index file. On failure the cache is untouched."""
    index = state.store().load_index()
    state.cache.replace(index)
    logger.debug("Refreshed index cache (%d instances)", len(index.instances))
