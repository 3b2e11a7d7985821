"""
Plain value records produced by the HTML page parsers.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Student:
    """A student as shown on a WebLab page."""

    name: str
    netid: str
    student_number: str
    platform_id: str

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the student: net-id plus WebLab platform id."""
        return (self.netid, self.platform_id)


@dataclass(frozen=True)
class StudentVerbose(Student):
    """A student row from the submissions list, with contact and enrollment data."""

    email: str = ""
    enrolled_for_grade: bool = True


@dataclass(frozen=True)
class SubmissionInfo:
    """One row of an assignment's submissions list."""

    student: StudentVerbose
    assignment_id: str
    url: str
    started: bool = False
    spec_tests: int = 0
    completed: bool = False
    grade: float = 0.0
    passed: bool = False
    guid: str | None = None
    last_saved: datetime | None = None


@dataclass(frozen=True)
class Submission:
    """The code a student submitted for an assignment."""

    student: Student
    solution: str
    test: str
    last_saved: datetime | None = None
