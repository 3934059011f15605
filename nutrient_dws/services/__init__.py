"""Services package for file inputs, action/output factories and the client facade."""

from nutrient_dws.services.build_actions import ActionWithFileInput, BuildActions
from nutrient_dws.services.build_outputs import BuildOutputs
from nutrient_dws.services.file_inputs import (
    is_url,
    validate_file_input,
    is_remote_file_input,
    process_file_input,
)

__all__ = [
    'ActionWithFileInput',
    'BuildActions',
    'BuildOutputs',
    'is_url',
    'validate_file_input',
    'is_remote_file_input',
    'process_file_input',
]
