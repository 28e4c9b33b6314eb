"""Domain enumerations shared by profiles, listings and applications"""

import enum


class Role(str, enum.Enum):
    """Role a visitor intends to sign up as"""
    CANDIDATE = "candidate"
    RECRUITER = "recruiter"


class ListingStatus(str, enum.Enum):
    """Job listing / idea status"""
    ACTIVE = "active"
    CLOSED = "closed"


class ApplicationStatus(str, enum.Enum):
    """Application review status"""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Collection(str, enum.Enum):
    """Named collections in the document store"""
    RECRUITERS = "recruiters"
    DEVELOPERS = "developers"
    JOBS = "jobs"
    IDEAS = "ideas"
    APPLICATIONS = "applications"
    INTENTS = "intents"
    USERS = "users"


class SessionStatus(str, enum.Enum):
    """Authentication state of a browser session"""
    UNKNOWN = "unknown"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"
