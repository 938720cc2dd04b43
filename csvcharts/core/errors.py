"""
Error codes, user-facing messages and the ingestion exception.
"""
from typing import Dict, Optional

# Error codes
class ErrorCodes:
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    FILE_EMPTY = "FILE_EMPTY"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    PARSE_ERROR = "PARSE_ERROR"
    TOO_MANY_FILES = "TOO_MANY_FILES"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    TIMEOUT = "TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"

ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    ErrorCodes.FILE_TOO_LARGE: {
        "message": "Your file is too large",
        "detail": "The uploaded CSV exceeds the size limit for a single file.",
        "suggestion": "Split the file into smaller parts, or export only the columns you want to chart."
    },
    ErrorCodes.FILE_EMPTY: {
        "message": "Your file looks empty",
        "detail": "We couldn't find a header row or any data in the uploaded file.",
        "suggestion": "Make sure the first line holds the column names and save the file again."
    },
    ErrorCodes.INVALID_FILE_TYPE: {
        "message": "We need a CSV file",
        "detail": "Only comma-separated files (.csv) can be analyzed.",
        "suggestion": "Most spreadsheet tools offer 'Download as CSV' or 'Save As... CSV' in the File menu."
    },
    ErrorCodes.PARSE_ERROR: {
        "message": "We're having trouble reading your file",
        "detail": "The file could not be read as CSV.",
        "suggestion": "Check that every row has the same number of separators and that column names are plain text."
    },
    ErrorCodes.TOO_MANY_FILES: {
        "message": "Too many files at once",
        "detail": "The upload contains more files than a single request accepts.",
        "suggestion": "Upload the files in smaller batches."
    },
    ErrorCodes.RATE_LIMIT_EXCEEDED: {
        "message": "Slow down a bit",
        "detail": "You're uploading files faster than the service allows.",
        "suggestion": "Wait about a minute and try again."
    },
    ErrorCodes.TIMEOUT: {
        "message": "This is taking longer than expected",
        "detail": "Analyzing your file took too long.",
        "suggestion": "Try a smaller sample of your data, the first thousand rows are usually enough."
    },
    ErrorCodes.UNKNOWN_ERROR: {
        "message": "Something unexpected happened",
        "detail": "We encountered an issue we weren't expecting.",
        "suggestion": "Give it another try in a moment. If it keeps happening, try a different file."
    }
}


class IngestionError(Exception):
    """Raised when an uploaded file cannot be turned into records."""

    def __init__(self, code: str, detail: Optional[str] = None):
        self.code = code
        self.detail = detail
        super().__init__(detail or code)


def get_error_response(error_code: str, additional_detail: Optional[str] = None) -> Dict[str, str]:
    """
    Get user-friendly error response for an error code.

    Args:
        error_code: One of the ErrorCodes constants
        additional_detail: Optional additional detail to append

    Returns:
        Dictionary with code, message, detail, and suggestion
    """
    error_info = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCodes.UNKNOWN_ERROR])

    response = {
        "code": error_code,
        "message": error_info["message"],
        "detail": error_info["detail"],
        "suggestion": error_info["suggestion"]
    }

    if additional_detail:
        response["detail"] = f"{response['detail']} {additional_detail}"

    return response
