"""
Pydantic models for payloads this tool does not control.

Covers the token cache file and every JSON body returned by Vault or the
AWS federation endpoint. Strict types are used throughout so that, for
example, a numeric token or a stringly-typed lease duration is rejected
instead of silently coerced.

Module: schemas
"""

from typing import Annotated, List, Union

from pydantic import AllowInfNan, BaseModel, ConfigDict, Field, Strict, StrictInt, StrictStr

# json.loads accepts NaN and Infinity; neither is a usable lease or timestamp
Number = Union[StrictInt, Annotated[float, Strict(), AllowInfNan(False)]]


class CachedToken(BaseModel):
    """Contents of the token cache file"""

    model_config = ConfigDict(extra="ignore")

    token: StrictStr
    expiration: Number = Field(..., description="Epoch milliseconds after which the token is invalid")
    policies: List[StrictStr]


class LdapAuth(BaseModel):
    model_config = ConfigDict(extra="ignore")

    client_token: StrictStr
    lease_duration: Number
    policies: List[StrictStr]


class LdapLoginResponse(BaseModel):
    """Body of ``POST /v1/auth/ldap/login/{username}``"""

    model_config = ConfigDict(extra="ignore")

    auth: LdapAuth


class RoleKeys(BaseModel):
    model_config = ConfigDict(extra="ignore")

    keys: List[StrictStr]


class RoleListResponse(BaseModel):
    """Body of ``LIST /v1/aws/{account}/roles``"""

    model_config = ConfigDict(extra="ignore")

    data: RoleKeys


class StsData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_key: StrictStr
    secret_key: StrictStr
    # Vault calls it the security token, the AWS tooling calls it the session token
    security_token: StrictStr


class StsResponse(BaseModel):
    """Body of ``GET /v1/aws/{account}/sts/{role}``"""

    model_config = ConfigDict(extra="ignore")

    data: StsData
    lease_duration: Number


class SigninTokenResponse(BaseModel):
    """Body of the federation endpoint's ``getSigninToken`` action"""

    model_config = ConfigDict(extra="ignore")

    signin_token: StrictStr = Field(..., alias="SigninToken")
