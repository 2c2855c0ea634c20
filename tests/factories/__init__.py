from .builders import add_windows, create_booking, create_profile, create_student, create_teacher

__all__ = ["add_windows", "create_booking", "create_profile", "create_student", "create_teacher"]
