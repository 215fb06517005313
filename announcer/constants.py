"""
Announcer-wide constants.

Values that are not meant to be changed through configuration.
"""

class MessageConstants:
    """Constants for announcement text."""

    FIRST_BLOOD_EMOJI = ":knife::drop_of_blood:"
    SOLVE_EMOJI = ":tada:"

    # Used when neither the snapshot nor CTFd gave us a name
    UNKNOWN_NAME = "Unknown"

    # Discord rejects message content longer than this
    MAX_MESSAGE_LENGTH = 2000

class CTFdConstants:
    """Constants for talking to the CTFd REST API."""

    API_PREFIX = "/api/v1"
    USER_AGENT = "ctfd-announcer"
