"""
Image builder collaborator.

Instances hand files to a BuilderFactory, which collects them into the build
context of the instance's image. Building and pushing the image happen
outside this package.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List
import logging

logger = logging.getLogger(__name__)


class BuildError(Exception):
    """Exception raised when the builder cannot accept a file."""
    pass


class BuilderFactory(ABC):
    """Interface of the image builder used by file staging."""

    @abstractmethod
    def add_to_builder(self, src: str, dest: str, chown: str) -> None:
        """
        Add a file to the image.

        Args:
            src: Path relative to the build context
            dest: Absolute path inside the image
            chown: Owner in "user:group" form

        Raises:
            BuildError: If the file cannot be added
        """
        pass


class DockerfileBuilderFactory(BuilderFactory):
    """
    Builder that records ADD instructions for a Dockerfile.

    The Dockerfile is written into the instance's build directory next to the
    staged files, so every ADD source resolves inside the build context.
    """

    def __init__(self, base_image: str, build_dir: str):
        self.base_image = base_image
        self.build_dir = Path(build_dir)
        self.instructions: List[str] = []

    def add_to_builder(self, src: str, dest: str, chown: str) -> None:
        if not src or not dest:
            raise BuildError("src and dest must be set")
        # ADD sources are relative to the build context
        context_src = src.lstrip("/")
        self.instructions.append(f"ADD --chown={chown} {context_src} {dest}")
        logger.debug(f"Added '{dest}' to builder for '{self.build_dir}'")

    def render_dockerfile(self) -> str:
        lines = [f"FROM {self.base_image}", *self.instructions]
        return "\n".join(lines) + "\n"

    def write_dockerfile(self) -> Path:
        """
        Write the Dockerfile into the build directory.

        Returns:
            Path of the written Dockerfile

        Raises:
            BuildError: If the file cannot be written
        """
        dockerfile = self.build_dir / "Dockerfile"
        try:
            self.build_dir.mkdir(parents=True, exist_ok=True)
            dockerfile.write_text(self.render_dockerfile())
        except OSError as e:
            raise BuildError(f"error writing Dockerfile to '{dockerfile}': {e}") from e
        logger.info(f"Wrote Dockerfile: {dockerfile}")
        return dockerfile
