"""HR Records package.

Organized by feature modules (employees, documents, profile updates, OTP,
attendance, notifications, audit, ...) with a thin Flask controller layer over
service/repository layers.
"""
