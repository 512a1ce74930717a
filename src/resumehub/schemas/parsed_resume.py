from pydantic import BaseModel


class WorkExperience(BaseModel):
    company: str = ""
    position: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""
    is_current: bool = False


class Education(BaseModel):
    institution: str = ""
    degree: str = ""
    field_of_study: str = ""
    start_date: str = ""
    end_date: str = ""
    gpa: str = ""
    description: str = ""


class Project(BaseModel):
    name: str = ""
    description: str = ""
    technologies: list[str] = []
    start_date: str = ""
    end_date: str = ""
    link: str = ""


class ParsedResumeData(BaseModel):
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    summary: str | None = None
    linkedin_url: str | None = None
    github_url: str | None = None
    skills: list[str] = []
    languages: list[str] = []
    certifications: list[str] = []
    experience: list[WorkExperience] = []
    education: list[Education] = []
    projects: list[Project] = []
