from shared.exceptions.AppError import AppError
from shared.logging.logging_setup import ColorLogger


def to_public_failure(logger: ColorLogger, message: str, exc: Exception) -> AppError:
    """Log an unexpected failure with its traceback and return the 500 error shown to the caller.

    Must be called from inside the except block handling exc.
    """
    logger.exception("%s: %s", message, exc)
    return AppError(message, status_code=500)
