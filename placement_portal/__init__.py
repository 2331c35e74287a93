"""
College Placement Portal - backend package.

Admins post jobs and announcements and invite students; students register,
keep a profile, apply for jobs and read department-filtered messages.
"""

__version__ = "1.0.0"
