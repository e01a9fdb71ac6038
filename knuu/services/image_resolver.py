"""Resolve the container image an instance runs."""

from typing import Optional, TYPE_CHECKING
import logging
import uuid

from ..config import Settings, get_settings
from ..exceptions import IdentityGenerationError

if TYPE_CHECKING:
    from ..instance import Instance

logger = logging.getLogger(__name__)


def resolve_image(instance: "Instance", settings: Optional[Settings] = None) -> str:
    """
    Get the image reference for an instance.

    Returns the image set on the instance if there is one. Otherwise a fresh
    reference in the ephemeral registry is generated, e.g.
    "ttl.sh/550e8400-e29b-41d4-a716-446655440000:1h". The instance is not
    modified; callers store the result in instance.image_name so it is never
    generated twice.

    Raises:
        IdentityGenerationError: If the random source fails
    """
    if instance.image_name:
        return instance.image_name

    settings = settings or get_settings()
    try:
        image_id = uuid.uuid4()
    except (OSError, NotImplementedError) as e:
        raise IdentityGenerationError(f"error generating UUID: {e}") from e

    image_name = f"{settings.image_registry}/{image_id}:{settings.image_ttl}"
    logger.debug(f"Generated image name '{image_name}' for instance '{instance.cluster_name}'")
    return image_name
