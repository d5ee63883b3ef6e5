from sqlalchemy.exc import DBAPIError, SQLAlchemyError

FRIENDLY_MESSAGES = {
    "ConnectionError": "Unable to connect to a required service. Please try again later.",
    "TimeoutError": "The request took too long. Please try again later.",
}

DEFAULT_MESSAGE = "Something went wrong on our end. Please try again."


def get_friendly_message(error: Exception) -> str:
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return FRIENDLY_MESSAGES["ConnectionError"]
    if isinstance(error, SQLAlchemyError):
        return "Temporary issue while accessing data. Please try again shortly."
    for key, msg in FRIENDLY_MESSAGES.items():
        if key.lower() in type(error).__name__.lower():
            return msg
    return DEFAULT_MESSAGE
