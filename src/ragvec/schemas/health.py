from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    database: str
    table: str
    version: str


class StatusResponse(BaseModel):
    status: str
