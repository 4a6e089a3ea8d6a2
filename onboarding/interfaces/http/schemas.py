from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterReq(BaseModel):
    email: EmailStr
    password: str
    name: str | None = None

class LoginReq(BaseModel):
    email: EmailStr
    password: str

class UserResp(CamelModel):
    id: int
    email: EmailStr
    name: str | None = None
    role: str | None = None
    has_profile: bool = False

class TokenResp(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AssignRoleReq(BaseModel):
    # ADMIN сюда не входит: его нельзя выбрать самостоятельно
    role: Literal["TEACHER", "RECRUITER", "SCHOOL"]

class AssignRoleResp(CamelModel):
    success: bool
    message: str
    redirect_url: str | None = None
    error: str | None = None
    retryable: bool = False


class DecisionResp(BaseModel):
    kind: Literal["allow", "redirect"]
    page: str
    target: str | None = None


class RecruiterSetupReq(CamelModel):
    company_name: str = Field(min_length=2, max_length=255)
    company_website: HttpUrl | None = None
    position: str = Field(min_length=2, max_length=255)
    phone: str | None = None
    bio: str = Field(min_length=50, max_length=500)

    @field_validator("company_website", mode="before")
    @classmethod
    def empty_website(cls, v):
        return v or None

    def to_profile(self) -> dict:
        data = self.model_dump()
        if data["company_website"] is not None:
            data["company_website"] = str(data["company_website"])
        return data


class TeacherSetupReq(CamelModel):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    phone: str | None = None
    bio: str | None = Field(default=None, max_length=2000)
    current_country: str = Field(min_length=1)
    citizenship: str = Field(min_length=1)
    years_experience: int = Field(ge=0, le=50)
    subjects: list[str] = Field(min_length=1)
    degree_level: Literal["BA", "BS", "MA", "MS", "MEd", "PhD"]
    degree_major: str = Field(min_length=1, max_length=100)

    def to_profile(self) -> dict:
        return self.model_dump()


class ProfileSetupResp(CamelModel):
    success: bool = True
    redirect_url: str
