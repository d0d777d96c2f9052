"""
Service modules for the pass admin application.

Business logic shared by the admin blueprints and maintenance scripts:
PIN sessions, dynamic QR routes, push request review and automation rules.
"""
