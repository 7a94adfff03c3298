from fastapi import HTTPException, status

from schemas import ActionResult, ErrorCode

STATUS_BY_ERROR = {
    ErrorCode.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_OPERATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.STORE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_for_result(result: ActionResult) -> ActionResult:
    """Turn a failed ActionResult into the matching HTTPException."""
    if not result.success:
        status_code = STATUS_BY_ERROR.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR)
        raise HTTPException(status_code=status_code, detail=result.message)
    return result
