"""
Resolution of deferred actions into concrete build actions.
"""
import logging
from typing import Any, Union

from pydantic import ValidationError as PydanticValidationError

from nutrient_dws.core.error_handling import ValidationError
from nutrient_dws.models.build_models import BuildAction, FileHandle, RemoteFileHandle
from nutrient_dws.services.build_actions import ActionWithFileInput
from nutrient_dws.services.file_inputs import get_remote_url, is_remote_file_input
from nutrient_dws.workflows.asset_registry import AssetRegistry

logger = logging.getLogger(__name__)

ApplicableAction = Union[BuildAction, ActionWithFileInput]


class ActionResolver:
    """Turns ActionWithFileInput into concrete actions using an AssetRegistry."""

    def __init__(self, registry: AssetRegistry):
        self.registry = registry

    def resolve_file_handle(self, file_input: Any) -> FileHandle:
        """Embed a remote URL as-is or register a local input."""
        if is_remote_file_input(file_input):
            return RemoteFileHandle(url=get_remote_url(file_input))
        return self.registry.register(file_input)

    def resolve_action(self, action: ApplicableAction) -> Any:
        """Return concrete actions unchanged; build deferred ones from a fresh handle.

        Raises:
            ValidationError: If the deferred factory rejects its options
        """
        if isinstance(action, ActionWithFileInput):
            handle = self.resolve_file_handle(action.file_input)
            logger.debug(f"Resolved deferred action with file handle {handle!r}")
            try:
                return action.create_action(handle)
            except PydanticValidationError as e:
                raise ValidationError(
                    "Invalid action",
                    details={
                        "file_input": repr(action.file_input),
                        "errors": [
                            {"loc": [str(part) for part in err["loc"]], "msg": err["msg"]}
                            for err in e.errors()
                        ],
                    }
                ) from e
        return action
