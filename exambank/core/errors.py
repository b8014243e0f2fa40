"""
Domain errors raised by the exam services and rendered by the API layer.
"""


class ExamBankError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500
    error_type = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(ExamBankError):
    status_code = 400
    error_type = "invalid_input"


class InvalidSubmissionError(InvalidInputError):
    """Submission has no usable answers array."""


class NotFoundError(ExamBankError):
    status_code = 404
    error_type = "not_found"


class ExamNotFoundError(NotFoundError):
    def __init__(self, exam_name: str):
        super().__init__(f'Exam "{exam_name}" not found in the question bank')
        self.exam_name = exam_name


class NoPracticeAreasError(NotFoundError):
    def __init__(self, exam_name: str):
        super().__init__(f'No practice areas defined for exam "{exam_name}"')
        self.exam_name = exam_name


class NothingExaminableError(NotFoundError):
    """Exam exists but no area currently yields any selectable question."""

    def __init__(self, exam_name: str):
        super().__init__(f'Exam "{exam_name}" has no examinable questions for the configured syllabus')
        self.exam_name = exam_name


class UnresolvedAnswersError(ExamBankError):
    status_code = 409
    error_type = "unresolved_answers"

    def __init__(self, unresolved: int):
        super().__init__(f"{unresolved} submitted question hash(es) could not be resolved")
        self.unresolved = unresolved


class DuplicatePracticeAreaError(InvalidInputError):
    def __init__(self, exam_name: str, area_name: str):
        super().__init__(f'Practice area "{area_name}" already exists in exam "{exam_name}"')
        self.exam_name = exam_name
        self.area_name = area_name
