"""Project-specific framework utilities.

Configuration parsing for the app (`arcdesk.framework.config`) on top of the
strict `ConfigNamespace` reader. For the project-agnostic module kernel, use
`modulekit`.
"""
