"""Authentication-related Pydantic schemas."""

from pydantic import BaseModel

from nmt_access.db.enums import Role


class UserSession(BaseModel):
    """
    Full session context for authenticated requests.

    Returned by the get_current_session dependency. Role and organizational
    claims are re-read from the database, never trusted from the token.
    """
    user_id: str
    role: Role  # Validated enum
    email: str
    user_name: str
    corporate_client_id: str | None = None
    program_id: str | None = None
    authorized_programs: list[str] = []
