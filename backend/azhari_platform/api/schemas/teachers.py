"""Pydantic schemas for teacher selection and registration."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TeacherResponse(BaseModel):
    teacher_id: str
    teacher_name: str
    category: str
    category_label: str = Field("", description="Arabic display name of the category")
    bio: Optional[str] = None
    photo_url: Optional[str] = None
    video_url: Optional[str] = None
    grades: List[str] = Field(default_factory=list)


class EligibleTeachersResponse(BaseModel):
    teachers: List[TeacherResponse]


class TeacherChoiceRequest(BaseModel):
    teacher_id: str = Field(..., min_length=1)
    category: str
    stage: str
    grade: str


class TeacherChoiceResponse(BaseModel):
    student_id: str
    teacher_id: str
    category: str
    stage: str
    grade: str
    created: bool = Field(..., description="True when this was the first choice for the key")


class TeacherRegistrationRequest(BaseModel):
    school: str = ""
    employee_id: str = ""
    phone: str = ""
    stage: str = ""
    grades: List[str] = Field(default_factory=list)
    subject: str = Field("", description="Arabic subject or category label from the form")


class TeacherRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    school: str
    employee_id: str
    phone: str
    assigned_stage: str
    assigned_grades: List[str]
    assigned_category: str
    status: str
    rejection_reason: Optional[str] = None
    reviewed_at: Optional[datetime] = None


class RejectTeacherRequest(BaseModel):
    reason: Optional[str] = None


class TeacherApprovalRequest(BaseModel):
    approved: bool


class TeacherSubjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    category: str
    stage: str
    grade: str
    section: Optional[str] = None


class TeacherSubjectsResponse(BaseModel):
    subjects: List[TeacherSubjectResponse]


class TeacherStudentsResponse(BaseModel):
    student_ids: List[str] = Field(..., description="Students who chose this teacher for any category/stage/grade")
