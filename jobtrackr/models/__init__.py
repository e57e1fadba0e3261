"""
Database models package.
"""

from jobtrackr.models.user import User
from jobtrackr.models.oauth_account import OAuthAccount
from jobtrackr.models.application import Application, ApplicationStatus, ContractType

__all__ = ["User", "OAuthAccount", "Application", "ApplicationStatus", "ContractType"]
