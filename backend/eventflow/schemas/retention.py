"""
Pydantic schemas for the retention job.
"""

from pydantic import BaseModel


class RetentionRunResponse(BaseModel):
    success: bool = True
    warned: int
    deleted: int
    errors: int
