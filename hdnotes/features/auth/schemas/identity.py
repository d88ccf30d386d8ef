from pydantic import BaseModel


class Identity(BaseModel):
    """The authenticated caller, as resolved by the auth gate."""

    user_id: str
    email: str
    name: str
    verified: bool
