"""
Job Portal
Backend connecting job seekers and employers.

Architecture:
- MongoDB: users, jobs, applications (two-party soft delete)
- S3: resume files, routed by file extension
"""

__version__ = "1.0.0"
