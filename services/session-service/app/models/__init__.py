from .session import LoginResult, LoginStatus, MatchPolicy

__all__ = ["LoginResult", "LoginStatus", "MatchPolicy"]
