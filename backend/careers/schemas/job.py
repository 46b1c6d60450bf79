from datetime import datetime

from pydantic import BaseModel


class JobCreate(BaseModel):
    title: str
    department: str
    type: str
    level: str | None = None
    location: str
    description: str
    requirements: list[str] = []
    application_url: str


class JobUpdate(BaseModel):
    title: str | None = None
    department: str | None = None
    type: str | None = None
    level: str | None = None
    location: str | None = None
    description: str | None = None
    requirements: list[str] | None = None
    application_url: str | None = None
    is_active: bool | None = None


class Job(BaseModel):
    id: str
    title: str
    department: str
    type: str
    level: str | None = None
    location: str
    description: str
    requirements: list[str] = []
    application_url: str
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    def matches(self, keyword: str) -> bool:
        term = keyword.lower()
        return (
            term in self.title.lower()
            or term in self.description.lower()
            or term in self.department.lower()
            or any(term in req.lower() for req in self.requirements)
        )
