"""
File staging for instance images.

Files added to an instance are copied into its build directory under the
path they will have in the image, then registered with the builder using
that destination path as the build-context key:

    /tmp/knuu/<cluster_name>/<dest>  ->  ADD <dest> <dest>
"""

from pathlib import Path
from typing import TYPE_CHECKING
import logging
import shutil

from ..exceptions import FileStagingError, InvalidFileArgsError

if TYPE_CHECKING:
    from ..instance import Instance

logger = logging.getLogger(__name__)


def validate_file_args(src: str, dest: str, chown: str) -> None:
    """
    Check the arguments of a file staging request.

    Raises:
        InvalidFileArgsError: If an argument is empty or chown is not "user:group"
    """
    if not src:
        raise InvalidFileArgsError("src must be set")
    if not dest:
        raise InvalidFileArgsError("dest must be set")
    if not chown:
        raise InvalidFileArgsError("chown must be set")
    if len(chown.split(":")) != 2:
        raise InvalidFileArgsError("chown must be in format 'user:group'")


def stage_file(instance: "Instance", src: str, dest: str, chown: str) -> None:
    """
    Register a file with the instance's image builder.

    src is only validated. The builder receives dest as both source and
    destination, since the file sits in the build directory under dest.

    Raises:
        InvalidFileArgsError: If the arguments are invalid
        FileStagingError: If the builder rejects the file
    """
    validate_file_args(src, dest, chown)

    if instance.builder_factory is None:
        raise FileStagingError(instance.cluster_name, f"no builder configured for file '{dest}'")

    try:
        instance.builder_factory.add_to_builder(dest, dest, chown)
    except Exception as e:
        raise FileStagingError(
            instance.cluster_name,
            f"error adding file '{dest}' to instance '{instance.name}': {e}"
        ) from e

    logger.debug(f"Staged file '{dest}' for instance '{instance.cluster_name}'")


def copy_to_build_dir(instance: "Instance", src: str, dest: str) -> Path:
    """
    Copy a local file into the instance's build directory.

    Returns:
        Path of the copy: <build_dir>/<dest>

    Raises:
        FileStagingError: If the file cannot be copied
    """
    target = Path(instance.build_dir) / dest.lstrip("/")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, target)
    except OSError as e:
        raise FileStagingError(
            instance.cluster_name,
            f"error copying '{src}' to build directory: {e}"
        ) from e

    logger.debug(f"Copied '{src}' to '{target}'")
    return target
