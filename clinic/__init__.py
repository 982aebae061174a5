"""Clinic application for the hospital management backend.

This package contains the record models, the remote access layer that
maps records to their API shape, the session/identity model and the
notification feed, plus the views and route registrations serving them.
"""
