"""Route groups for the Image Redirector service.

This module collects logically-related endpoints:
- health: liveness probe
- images: `/random` and `/newest` redirects
"""
