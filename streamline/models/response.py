from pydantic import BaseModel, Field


class SubmissionResult(BaseModel):
    ok: bool
    message: str
    status_code: int = Field(200, exclude=True)


class HealthResponse(BaseModel):
    ok: bool = True
    mail_ready: bool
