"""
Server core configuration.

Contains the settings model and the static constants used by the web server.
"""
