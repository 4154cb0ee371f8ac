"""Classroom attendance package.

Organized by feature modules (users, courses, roster, attendance, reports)
on top of a single entity store, with a thin Flask controller layer.
"""
