"""HR attendance backend package.

Organized by feature modules (attendance, leave, payroll, users, ...) with a
thin Flask JSON controller layer on top of service/repository layers.
"""
