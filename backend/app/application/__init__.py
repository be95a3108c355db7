"""
Application Layer

Request and response shapes that sit between the HTTP API and the
preventive maintenance domain.

Components:
- dtos/: API request and response models
"""
