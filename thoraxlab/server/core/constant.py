"""
Server constants.

Static values shared by the application factory and the API routers.
"""

PROJECT_NAME = "ThoraxLab"
API_V1_STR = "/api/v1"
API_VERSION = "0.1.0"
SCHEMA_VERSION = "v1"
