"""Presence tracking package.

Organized by feature modules (attendance, employees) with a thin Flask
controller layer over service/repository layers. The attendance module owns
the per-employee, per-day presence state machine.
"""
