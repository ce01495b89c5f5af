from typing import Optional

from pydantic import Field

from app.core.responses import ApiSchema
from app.features.users.schemas import UserOut

# ---------- Inputs ----------

class SignUpIn(ApiSchema):
    # champs texte du formulaire multipart, validés par le service
    full_name: str = ""
    email: str = ""
    username: str = ""
    password: str = ""

class SignInIn(ApiSchema):
    username: Optional[str] = None
    email: Optional[str] = None
    password: str

class RefreshIn(ApiSchema):
    refresh_token: Optional[str] = None

class ChangePasswordIn(ApiSchema):
    old_password: str
    new_password: str = Field(min_length=8, max_length=128)


# ---------- Outputs ----------

class TokenPairOut(ApiSchema):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # secondes (durée de l'access token)

class SignInOut(TokenPairOut):
    user: UserOut
