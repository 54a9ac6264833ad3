"""Instance directory store — physical layout under the instances directory.

Layout:
  {instances_dir}/instances.index.json     — the index (see types.InstanceIndex)
  {instances_dir}/{uuid}/                  — one directory per instance
  {instances_dir}/{uuid}/instance.{ext}    — optional cover image
"""

import shutil
import uuid
from pathlib import Path

from .errors import DeserializationError, InvalidInputError, IoError, SerializationError
from .logging_config import get_logger
from .types import InstanceIndex

logger = get_logger(__name__)

INDEX_FILE_NAME = "instances.index.json"
IMAGE_STEM = "instance"


class InstanceStore:
    """Owns instance directories and the index file under one base directory."""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    @property
    def index_path(self) -> Path:
        return self.base_dir / INDEX_FILE_NAME

    def instance_dir(self, instance_id: uuid.UUID) -> Path:
        return self.base_dir / str(instance_id)

    def create(self, instance_id: uuid.UUID) -> Path:
        """Create the empty directory for a new instance."""
        path = self.instance_dir(instance_id)
        try:
            path.mkdir(parents=True, exist_ok=False)
        except OSError as e:
            raise IoError(f"Failed to create instance directory {path}: {e}") from e
        logger.debug("Created instance directory %s", path)
        return path

    def attach_image(self, instance_id: uuid.UUID, source_path: Path) -> Path:
        """Copy a cover image into the instance directory as instance.{ext}."""
        source_path = Path(source_path)
        ext = source_path.suffix[1:]
        if not ext:
            raise InvalidInputError(f"Image path has no file extension: {source_path}")
        try:
            # Undecodable bytes in the name surface as lone surrogates
            ext.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidInputError(f"Image file extension is not valid text: {source_path!r}") from e

        dest = self.instance_dir(instance_id) / f"{IMAGE_STEM}.{ext}"
        try:
            shutil.copyfile(source_path, dest)
        except OSError as e:
            raise IoError(f"Failed to copy image {source_path} to {dest}: {e}") from e
        logger.debug("Attached image %s", dest)
        return dest

    def image_path(self, instance_id: uuid.UUID) -> Path | None:
        """Find the cover image of an instance, if it has one."""
        matches = sorted(self.instance_dir(instance_id).glob(f"{IMAGE_STEM}.*"))
        return matches[0] if matches else None

    def delete(self, instance_id: uuid.UUID) -> None:
        """Recursively remove an instance directory. No rollback on partial failure."""
        path = self.instance_dir(instance_id)
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise IoError(f"Failed to remove instance directory {path}: {e}") from e
        logger.debug("Removed instance directory %s", path)

    # --- Index file ---

    def load_index(self) -> InstanceIndex:
        """Read and parse the index file from disk."""
        path = self.index_path
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise IoError(f"Failed to read index file {path}: {e}") from e
        try:
            return InstanceIndex.from_json(raw.decode("utf-8"))
        except (ValueError, KeyError, TypeError) as e:
            # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
            raise DeserializationError(f"Malformed index file {path}: {e}") from e

    def save_index(self, index: InstanceIndex) -> None:
        """Overwrite the index file. Serializes fully before touching the file."""
        try:
            text = index.to_json() + "\n"
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to serialize instances index: {e}") from e
        path = self.index_path
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise IoError(f"Failed to write index file {path}: {e}") from e

    def ensure_index(self) -> bool:
        """Create the base directory and an empty index if missing.

        Returns True if a new index file was written.
        """
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IoError(f"Failed to create instances directory {self.base_dir}: {e}") from e
        if self.index_path.exists():
            return False
        self.save_index(InstanceIndex())
        logger.info("Created empty index at %s", self.index_path)
        return True
