"""Password reset endpoint.

Placeholder flow: reset tokens are emailed but not stored, and resets are
accepted without checking the token.
"""

from fastapi import APIRouter, Depends

from ordering.models.errors import ErrorCode, OrderingError
from ordering.services.email_service import EmailServiceError
from ordering.services.password_reset import PasswordResetService
from ordering_api.dependencies import password_reset_dependency
from ordering_api.models.password import PasswordResetRequest, PasswordResetResponse

router = APIRouter(tags=["password"])

ACTION_REQUEST = "request"
ACTION_RESET = "reset"


@router.post(
    "/reset-password",
    summary="Request or apply a password reset",
    response_model=PasswordResetResponse,
    responses={
        200: {"description": "Reset email sent, or reset accepted"},
        400: {"description": "Invalid email or action"},
        500: {"description": "Reset email could not be sent"},
    },
)
async def reset_password(
    body: PasswordResetRequest,
    service: PasswordResetService = Depends(password_reset_dependency),
) -> PasswordResetResponse:
    if body.action == ACTION_REQUEST:
        try:
            service.request_reset(body.email)
        except EmailServiceError as e:
            raise OrderingError(ErrorCode.EMAIL_DELIVERY_FAILED) from e
        return PasswordResetResponse(message="Password reset email sent")

    if body.action == ACTION_RESET:
        service.reset_password(body.email, body.token)
        return PasswordResetResponse(message="Password reset successfully")

    raise OrderingError(ErrorCode.INVALID_ACTION, details={"action": body.action})
