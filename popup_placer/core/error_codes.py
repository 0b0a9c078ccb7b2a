# popup_placer/core/error_codes.py
"""
Structured error codes for popup updates and runs.
Use these keys in return values and logs; map to user-facing messages in the UI.
"""

# Known error keys
ADAPTER_UNAVAILABLE = "adapter_unavailable"
MALFORMED_CANDIDATE = "malformed_candidate"
NO_VISIBLE_CANDIDATES = "no_visible_candidates"

# User-facing messages (short, actionable)
USER_MESSAGES: dict[str, str] = {
    ADAPTER_UNAVAILABLE: "Map is not ready yet. Popups will appear on the next view change.",
    MALFORMED_CANDIDATE: "Some features were skipped because they have no id or no point coordinates.",
    NO_VISIBLE_CANDIDATES: "No ranked places in view. Try zooming out or changing the class filter.",
}


def user_message(error_key: str | None, fallback: str = "Something went wrong.") -> str:
    """Return a user-facing message for the given error key."""
    if not error_key:
        return fallback
    return USER_MESSAGES.get(error_key, fallback)
