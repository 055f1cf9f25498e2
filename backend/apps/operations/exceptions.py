from rest_framework import status
from rest_framework.exceptions import APIException


class DocumentValidationError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Document cannot be validated."
    default_code = "document_validation_error"

    def __init__(self, detail=None, *, line_errors=None, field_errors=None):
        self.line_errors = line_errors or []
        self.field_errors = field_errors or {}
        super().__init__(detail)


class InvalidTransition(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Document status does not allow this action."
    default_code = "invalid_transition"


class DocumentLocked(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Only draft documents can be changed."
    default_code = "document_locked"


class StockConflict(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Stock rows are busy, retry the request."
    default_code = "stock_conflict"
