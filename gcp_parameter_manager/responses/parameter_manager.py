from datetime import datetime

from pydantic import BaseModel


class ParameterOperationResponse(BaseModel):
    """
    Outcome of a mutating Parameter Manager operation.

    Failed operations raise instead of returning a response, so ``success``
    is always True on a returned instance.
    """

    success: bool = True
    message: str
    resource_name: str
    operation_time: datetime
