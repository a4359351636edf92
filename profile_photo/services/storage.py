from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from uuid import uuid4

from profile_photo.config import DEFAULT_RELATIVE_DIR, PhotoSettings, get_settings
from profile_photo.services.errors import StorageWriteError

logger = logging.getLogger(__name__)


class PhotoStore:
    """
    Flat directory of JPEG photos named by random tokens.

    Photos live under `<storage_root><relative_dir>/<hex>.jpg`. The store never
    keeps an index; callers hold on to the returned relative path.
    """

    def __init__(
        self,
        storage_root: Path,
        relative_dir: str = DEFAULT_RELATIVE_DIR,
        log: logging.Logger | None = None,
    ) -> None:
        self._storage_root = Path(storage_root)
        self._relative_dir = "/" + relative_dir.strip("/")
        self._photo_dir = self._storage_root.joinpath(*self._relative_dir.strip("/").split("/"))
        self._log = log or logger

    @property
    def storage_root(self) -> Path:
        return self._storage_root

    @property
    def photo_dir(self) -> Path:
        return self._photo_dir

    def save(self, data: bytes) -> str:
        """
        Write a new photo and return its storage-relative path.

        Bytes go to a hidden temporary file first; renaming it to the final
        name is the commit point, so a half-written photo is never visible
        under a `.jpg` name.

        Raises:
            StorageWriteError: The directory or file could not be written.
        """
        file_name = f"{uuid4().hex}.jpg"
        final_path = self._photo_dir / file_name
        tmp_path = self._photo_dir / f".{file_name}.tmp"

        try:
            self._photo_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "xb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, final_path)
        except OSError as exc:
            self._log.error("Failed to write photo %s: %s", final_path, exc)
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                self._log.warning("Could not remove temporary file %s", tmp_path)
            raise StorageWriteError() from exc

        return f"{self._relative_dir}/{file_name}"

    def resolve(self, relative_path: str) -> str | None:
        """
        Map a storage-relative path to an absolute path inside the photo folder.

        Returns None when the path points anywhere outside the photo folder.
        """
        candidate = relative_path[1:] if relative_path.startswith("/") else relative_path
        candidate = candidate.replace("/", os.sep)
        absolute = os.path.abspath(os.path.join(self._storage_root, candidate))

        allowed_prefix = os.path.abspath(self._photo_dir) + os.sep
        # normcase folds case only where the OS does; casefolding on POSIX would
        # let a differently-cased sibling folder pass the prefix check.
        if not os.path.normcase(absolute).startswith(os.path.normcase(allowed_prefix)):
            return None
        return absolute

    def retire(self, previous_relative_path: str | None) -> bool:
        """
        Delete a superseded photo, best effort.

        Nothing here ever raises: the new photo is already stored, so a file
        that cannot be removed is only logged.

        Returns:
            True if a file was deleted.
        """
        if not previous_relative_path or not previous_relative_path.strip():
            return False

        try:
            absolute = self.resolve(previous_relative_path)
            if absolute is None:
                self._log.warning(
                    "Refusing to delete %r: outside of photo directory %s",
                    previous_relative_path,
                    self._photo_dir,
                )
                return False
            if not os.path.isfile(absolute):
                self._log.info("Previous photo %s no longer exists", absolute)
                return False
            os.remove(absolute)
        except (OSError, ValueError) as exc:
            self._log.warning("Failed to delete previous photo %r: %s", previous_relative_path, exc)
            return False

        self._log.info("Deleted previous photo %s", absolute)
        return True


@lru_cache(maxsize=4)
def _store_for(storage_root: Path, relative_dir: str) -> PhotoStore:
    return PhotoStore(storage_root, relative_dir)


def get_photo_store(settings: PhotoSettings | None = None) -> PhotoStore:
    """
    Return the photo store for `settings` (the current settings by default).

    Stores are cached per storage root and folder, so a store always follows
    the settings it was asked for, including after `get_settings.cache_clear()`
    or a dependency override of `get_settings`.
    """
    settings = settings or get_settings()
    return _store_for(settings.storage_root, settings.relative_dir)
