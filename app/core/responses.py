from fastapi import status
from pydantic import BaseModel
from fastapi.responses import JSONResponse

GENERIC_PROXY_ERROR = "An error occurred while processing your request."
GENERIC_SERVER_ERROR = "Something went wrong!"


class ErrorResponse(BaseModel):
    error: str


def send_error(
    message: str = GENERIC_SERVER_ERROR,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
) -> JSONResponse:
    return JSONResponse(
        content=ErrorResponse(error=message).model_dump(), status_code=status_code
    )
