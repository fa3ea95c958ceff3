from pydantic import BaseModel


class ReportOut(BaseModel):
    total_capacity: int
    total_confirmed: int
    total_waitlisted: int

    class Config:
        from_attributes = True
