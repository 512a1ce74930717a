from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    database: str
    ai_provider: str
    version: str


class StatusResponse(BaseModel):
    status: str


class UserStats(BaseModel):
    total: int
    active: int
    recent: int


class ResumeStats(BaseModel):
    total: int
    uploaded: int
    processing: int
    completed: int
    failed: int
    recent: int
    average_confidence: float | None


class SystemStats(BaseModel):
    users: UserStats
    resumes: ResumeStats
    version: str
