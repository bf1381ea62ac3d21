"""Folder-backed photo library used as the album asset source.

Every image file under the library directory is an asset whose identifier is
its library-relative POSIX path. New assets are stored under a name derived
from the SHA-1 of their content, so creating the same image twice returns the
existing asset instead of a copy.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
import hashlib
import os
from pathlib import Path

from loguru import logger

from core.errors import AssetCreationFailed
from core.models import Asset, PermissionState
from core.services.interfaces import DeleteResult
from infrastructure.delete_service import DeleteService
from infrastructure.image_service import (
    FORMAT_EXTENSIONS,
    encode_scaled,
    image_size,
    is_supported_image,
    probe_image,
)
from infrastructure.utils import get_capture_datetime


class LocalLibrary:
    """Photo library stored as image files in a directory tree."""

    def __init__(self, root: str | Path, deleter: DeleteService | None = None) -> None:
        self._root = Path(root).expanduser()
        self._deleter = deleter or DeleteService()

    @property
    def root(self) -> Path:
        return self._root

    # Permissions
    def permission_status(self) -> PermissionState:
        """Derive access from the library directory.

        Missing directory is undetermined, read/write access is granted,
        read-only access is limited, anything else is denied.
        """
        if not self._root.exists():
            return PermissionState.UNDETERMINED
        if not self._root.is_dir():
            return PermissionState.DENIED
        if os.access(self._root, os.R_OK | os.X_OK):
            if os.access(self._root, os.W_OK):
                return PermissionState.GRANTED
            return PermissionState.LIMITED
        return PermissionState.DENIED

    def request_permission(self, callback: Callable[[PermissionState], None]) -> None:
        """Create the library directory, then report the resulting state."""
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as ex:
            logger.error("Cannot create library at {}: {}", self._root, ex)
            callback(PermissionState.DENIED)
            return
        callback(self.permission_status())

    # Queries
    def fetch_all(self) -> list[Asset]:
        """All assets, newest capture first."""
        assets: list[Asset] = []
        if not self._root.is_dir():
            return assets
        for dirpath, dirnames, filenames in os.walk(self._root):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            for name in sorted(filenames):
                if name.startswith("."):
                    continue
                path = os.path.join(dirpath, name)
                if not is_supported_image(path):
                    continue
                asset = self._asset_for(Path(path))
                if asset is not None:
                    assets.append(asset)
        assets.sort(key=lambda a: a.asset_id)
        assets.sort(key=lambda a: a.creation_date or datetime.min, reverse=True)
        return assets

    def load_image(self, asset: Asset, width: int, height: int) -> bytes:
        return encode_scaled(str(self._path_for(asset.asset_id)), width, height)

    # Mutations
    def delete(self, asset_ids: Sequence[str]) -> DeleteResult:
        result = DeleteResult()
        paths: dict[str, str] = {}
        for asset_id in asset_ids:
            try:
                paths[str(self._path_for(asset_id))] = asset_id
            except ValueError as ex:
                result.failed.append((asset_id, str(ex)))
        success, failed = self._deleter.delete_to_trash(list(paths))
        result.success_ids.extend(paths[p] for p in success)
        result.failed.extend((paths[p], reason) for p, reason in failed)
        return result

    def create(self, image_data: bytes) -> Asset:
        """Store encoded image data as a new asset.

        Raises:
            AssetCreationFailed: Data is not a decodable image or cannot be
                written.
        """
        try:
            fmt, _, _ = probe_image(image_data)
        except (OSError, ValueError) as ex:
            raise AssetCreationFailed(f"not a decodable image: {ex}") from ex

        digest = hashlib.sha1(image_data).hexdigest()[:16]
        target = self._root / f"{digest}{FORMAT_EXTENSIONS.get(fmt.upper(), '.png')}"
        if not target.exists():
            try:
                self._root.mkdir(parents=True, exist_ok=True)
                target.write_bytes(image_data)
            except OSError as ex:
                raise AssetCreationFailed(f"cannot write {target}: {ex}") from ex
            logger.info("Created asset {}", target.name)
        asset = self._asset_for(target)
        if asset is None:
            raise AssetCreationFailed(f"stored file is unreadable: {target}")
        return asset

    # Internal helpers
    def _asset_for(self, path: Path) -> Asset | None:
        try:
            width, height = image_size(str(path))
        except (OSError, ValueError) as ex:
            logger.warning("Skipping unreadable image {}: {}", path, ex)
            return None
        return Asset(
            asset_id=path.relative_to(self._root).as_posix(),
            pixel_width=width,
            pixel_height=height,
            creation_date=get_capture_datetime(str(path)),
            file_path=str(path),
        )

    def _path_for(self, asset_id: str) -> Path:
        root = self._root.resolve()
        path = (root / asset_id).resolve()
        if root != path and root not in path.parents:
            raise ValueError(f"asset id outside library: {asset_id}")
        return path
