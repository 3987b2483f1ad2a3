from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from dataclasses_json import LetterCase, dataclass_json


class AuthErrorReason(Enum):
    FETCH_ERROR = "FetchError"
    VAULT_POST_NOT_200 = "VaultPostNot200"
    INVALID_BODY = "InvalidBody"


@dataclass
class VaultCredential:
    username: str
    # kept out of repr so a logged credential never leaks the password
    password: str = field(repr=False)


@dataclass_json
@dataclass(frozen=True)
class AuthToken:
    token: str = field(repr=False)
    # epoch milliseconds
    expiration: int
    policies: List[str]


@dataclass_json
@dataclass(frozen=True)
class AuthError:
    reason: AuthErrorReason
    details: str


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class CloudCredential:
    access_key: str
    secret_key: str = field(repr=False)
    session_token: str = field(repr=False)
    lease_duration_seconds: int


@dataclass(frozen=True)
class AssumeRoleResult:
    credential: CloudCredential
    # False when ~/.aws/credentials could not be written
    persisted: bool
    profile_name: Optional[str] = None
