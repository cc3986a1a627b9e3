# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Read-only adapters over tables owned by the wider platform: job listings,
user profiles and work history. Nothing in this module writes rows.
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol

from sqlalchemy import Boolean, Column, Date, Integer, String, Text, select
from sqlalchemy.orm import sessionmaker

from resume_pipeline.database import Base, session_scope


class JobRecord(Base):
    __tablename__ = "jobs"

    id = Column(String(64), primary_key=True)
    title = Column(String(255), nullable=True)
    company_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    responsibilities = Column(Text, nullable=True)
    required_education = Column(String(255), nullable=True)
    required_certifications = Column(String(255), nullable=True)
    experience_min = Column(Integer, nullable=True)
    experience_max = Column(Integer, nullable=True)
    location = Column(String(255), nullable=True)


class UserProfileRecord(Base):
    __tablename__ = "user_profiles"

    user_id = Column(String(64), primary_key=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    current_location = Column(String(255), nullable=True)
    linkedin = Column(String(255), nullable=True)
    github = Column(String(255), nullable=True)
    portfolio = Column(String(255), nullable=True)
    headline = Column(String(255), nullable=True)
    summary = Column(Text, nullable=True)
    primary_skills = Column(Text, nullable=True)  # JSON array or comma list
    secondary_skills = Column(Text, nullable=True)
    institution = Column(String(255), nullable=True)
    highest_education = Column(String(255), nullable=True)
    field_of_study = Column(String(255), nullable=True)
    graduation_year = Column(String(10), nullable=True)
    gpa = Column(String(20), nullable=True)
    certifications = Column(Text, nullable=True)  # JSON array


class WorkExperienceRecord(Base):
    __tablename__ = "work_experiences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    job_title = Column(String(255), nullable=True)
    company_name = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    is_current = Column(Boolean, default=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)


class ProfileStore(Protocol):
    def get_profile(self, user_id: str) -> Optional[Mapping[str, Any]]:
        ...

    def get_work_history(self, user_id: str) -> List[Mapping[str, Any]]:
        ...


def _row_to_dict(record: Base) -> Dict[str, Any]:
    return {column.name: getattr(record, column.name) for column in record.__table__.columns}


class SqlJobStore:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_job(self, job_id: str) -> Optional[Mapping[str, Any]]:
        with session_scope(self.session_factory) as session:
            record = session.get(JobRecord, job_id)
            return _row_to_dict(record) if record else None


class SqlProfileStore:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_profile(self, user_id: str) -> Optional[Mapping[str, Any]]:
        with session_scope(self.session_factory) as session:
            record = session.get(UserProfileRecord, user_id)
            return _row_to_dict(record) if record else None

    def get_work_history(self, user_id: str) -> List[Mapping[str, Any]]:
        """Active roles, current first, then most recently ended."""
        with session_scope(self.session_factory) as session:
            records = session.execute(
                select(WorkExperienceRecord)
                .where(WorkExperienceRecord.user_id == user_id, WorkExperienceRecord.is_active.is_(True))
                .order_by(
                    WorkExperienceRecord.is_current.desc(),
                    WorkExperienceRecord.end_date.desc(),
                    WorkExperienceRecord.start_date.desc(),
                )
            ).scalars().all()
            return [_row_to_dict(r) for r in records]
