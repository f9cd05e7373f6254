from app.db.base import Base
from app.models.opening import RecOpening
from app.models.opening_form import RecOpeningForm
from app.models.question import RecQuestion
from app.models.response import RecResponse
from app.models.sheet_row_retry import RecSheetRowRetry

__all__ = [
    "Base",
    "RecOpening",
    "RecOpeningForm",
    "RecQuestion",
    "RecResponse",
    "RecSheetRowRetry",
]
