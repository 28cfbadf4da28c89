"""
Prompt validation: reject prompts that cannot produce a sensible playlist.

Not part of extraction; callers run it before generation if they want to
gate ambiguous input with a user-correctable message.
"""
from ..models import ValidationResult
from .activity import ActivityTable, detect_intensity, find_matching_activities
from .duration import has_duration
from .genre import SUPPORTED_GENRES, detect_genre

MISSING_CONTEXT_ERROR = (
    "Specify an activity (e.g. running, studying) or a genre ({})".format(", ".join(SUPPORTED_GENRES))
)
MISSING_DURATION_ERROR = "Specify a duration (e.g. '30 minutes', '1 hour', 'approx 45 min')"
MISSING_INTENSITY_WARNING = "No intensity given for the activity (e.g. 'high', 'more chill'); using the default"


def validate_prompt(prompt: str, table: ActivityTable) -> ValidationResult:
    """
    Check that a prompt names a duration and an activity or genre.

    Returns:
        ValidationResult with errors (blocking) and warnings (informational)
    """
    errors = []
    warnings = []

    has_activity = bool(find_matching_activities(prompt, table))
    if not has_activity and detect_genre(prompt) is None:
        errors.append(MISSING_CONTEXT_ERROR)

    if not has_duration(prompt):
        errors.append(MISSING_DURATION_ERROR)

    if has_activity and detect_intensity(prompt, table) is None:
        warnings.append(MISSING_INTENSITY_WARNING)

    return ValidationResult(is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings))
