"""
Custom exceptions for the inscription webhook.
"""

from typing import Optional


class OrdhookException(Exception):
    """Base exception for all ordhook errors."""
    pass


class AuthError(OrdhookException):
    """Exception raised when a webhook signature is missing or invalid."""
    pass


class SetupError(OrdhookException):
    """Exception raised before a webhook response could be committed."""
    pass


class DownloadError(OrdhookException):
    """Exception raised when a remote file cannot be fetched or stored."""
    
    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class CommandError(OrdhookException):
    """Exception raised when an external command fails or cannot be spawned."""
    
    def __init__(
        self,
        message: str,
        command_line: str,
        exit_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = ""
    ):
        super().__init__(message)
        self.command_line = command_line
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class ConfigurationException(OrdhookException):
    """Exception raised for invalid configuration."""
    pass
