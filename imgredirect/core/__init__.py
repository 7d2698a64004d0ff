"""Core configuration and logging setup.

Contains:
- config.py: settings loaded from the environment, `.env`, and CLI flags
- log.py: root logger configuration shared by the app and uvicorn
"""
