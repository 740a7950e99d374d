from __future__ import annotations


class GradsimError(Exception):
    """Base class for errors raised by gradsim."""


class RequirementDataError(GradsimError):
    """Requirement specification or catalog is missing or structurally invalid."""


class CourseNotFoundError(GradsimError, KeyError):
    def __init__(self, course_id: str) -> None:
        super().__init__(course_id)
        self.course_id = course_id

    def __str__(self) -> str:
        return f"no course with id {self.course_id!r}"
