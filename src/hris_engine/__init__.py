"""HRIS time-accounting and approval engine.

This package is organized by feature modules (shifts, attendance, leave,
requests, ...) with SOLID service/repository layers. Persistence sits behind
Protocol repositories so the rules can run against MySQL or in-memory fakes.
"""
