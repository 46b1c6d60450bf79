from datetime import datetime

from careers.schemas.job import Job
from careers.storage.codec import job_to_row

SAMPLE_JOBS = [
    {
        "id": "job1",
        "title": "Content Writer",
        "department": "Marketing",
        "type": "Full-time",
        "level": "Mid-level",
        "location": "Navi Mumbai, India",
        "description": "Write product stories, launch copy and long-form articles for our riders and partners.",
        "requirements": ["Excellent written English", "Portfolio of published work", "2+ years experience"],
        "application_url": "https://forms.google.com/sample-content-writer",
    },
    {
        "id": "job2",
        "title": "Senior Frontend Developer",
        "department": "Engineering",
        "type": "Full-time",
        "level": "Senior",
        "location": "Remote",
        "description": "Build fast, accessible web experiences with React and TypeScript.",
        "requirements": ["React", "TypeScript", "CSS", "3+ years experience"],
        "application_url": "https://forms.google.com/sample-frontend",
    },
    {
        "id": "job3",
        "title": "Backend Engineer",
        "department": "Engineering",
        "type": "Full-time",
        "level": "Mid-level",
        "location": "Remote",
        "description": "Design APIs and data pipelines for vehicle telemetry and service bookings.",
        "requirements": ["Python", "PostgreSQL", "Cloud infrastructure", "2+ years experience"],
        "application_url": "https://forms.google.com/sample-backend",
    },
    {
        "id": "job4",
        "title": "Service Technician",
        "department": "Operations",
        "type": "Contract",
        "level": None,
        "location": "Navi Mumbai, India",
        "description": "Diagnose and repair two-wheelers at our service centre.",
        "requirements": ["ITI or diploma in automobile engineering", "Two-wheeler repair experience"],
        "application_url": "https://forms.google.com/sample-technician",
    },
]


def sample_job_rows(now: datetime) -> list[list[str]]:
    return [
        job_to_row(Job(**data, is_active=True, created_at=now, updated_at=now))
        for data in SAMPLE_JOBS
    ]
