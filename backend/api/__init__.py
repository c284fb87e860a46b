"""
EcoLearn API package.

The application lives in ``api.app``; it is not imported here so that
modules can depend on ``api.dependencies`` and ``api.middleware`` without
building the app.
"""
