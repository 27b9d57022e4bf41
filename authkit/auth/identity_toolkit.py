from typing import NotRequired, TypedDict

# Constants
IDENTITY_TOOLKIT_ENDPOINTS: dict[str, str] = {
    "signUp": "v1/accounts:signUp",
    "signInWithPassword": "v1/accounts:signInWithPassword",
    "signInWithIdp": "v1/accounts:signInWithIdp",
    "sendOobCode": "v1/accounts:sendOobCode",
    "update": "v1/accounts:update",
    "delete": "v1/accounts:delete",
    "lookup": "v1/accounts:lookup",
}


# Request schemas
class SignUpRequest(TypedDict, total=False):
    """Request schema for signUp endpoint.

    https://cloud.google.com/identity-platform/docs/reference/rest/v1/accounts/signUp
    """

    email: str
    password: str
    displayName: NotRequired[str]
    returnSecureToken: bool


class SignInWithPasswordRequest(TypedDict, total=False):
    """Request schema for signInWithPassword endpoint.

    https://cloud.google.com/identity-platform/docs/reference/rest/v1/accounts/signInWithPassword
    """

    email: str
    password: str
    returnSecureToken: bool
    idToken: NotRequired[str]
    tenantId: NotRequired[str]


class SignInWithIdpRequest(TypedDict, total=False):
    """Request schema for signInWithIdp endpoint.

    https://cloud.google.com/identity-platform/docs/reference/rest/v1/accounts/signInWithIdp
    """

    # URL-encoded: id_token, access_token, providerId, nonce
    postBody: str
    requestUri: str
    returnSecureToken: bool
    returnIdpCredential: NotRequired[bool]
    idToken: NotRequired[str]
    tenantId: NotRequired[str]


class SendOobCodeRequest(TypedDict, total=False):
    requestType: str  # PASSWORD_RESET | VERIFY_EMAIL | ...
    email: NotRequired[str]
    idToken: NotRequired[str]
    continueUrl: NotRequired[str]


class UpdateAccountRequest(TypedDict, total=False):
    """Request schema for accounts:update endpoint.

    https://cloud.google.com/identity-platform/docs/reference/rest/v1/accounts/update
    """

    idToken: str
    password: NotRequired[str]
    displayName: NotRequired[str]
    photoUrl: NotRequired[str]
    deleteAttribute: NotRequired[list[str]]
    returnSecureToken: NotRequired[bool]


# Response schemas
class SignUpResponse(TypedDict, total=False):
    kind: str
    localId: str
    email: str
    displayName: str
    idToken: str
    refreshToken: str
    expiresIn: str


class SignInWithPasswordResponse(TypedDict, total=False):
    """Response schema for signInWithPassword endpoint."""

    kind: str
    localId: str  # The UID of the authenticated user
    email: str
    displayName: str
    idToken: str
    registered: bool
    refreshToken: str
    expiresIn: str  # Token expiration time in seconds


class SignInWithIdpResponse(TypedDict, total=False):
    """Response schema for signInWithIdp endpoint."""

    providerId: str
    localId: str
    email: str
    emailVerified: bool
    displayName: str
    fullName: str
    firstName: str
    lastName: str
    photoUrl: str
    idToken: str
    refreshToken: str
    expiresIn: str
    isNewUser: bool
    needConfirmation: bool


class UpdateAccountResponse(TypedDict, total=False):
    """Response schema for accounts:update endpoint."""

    kind: str
    localId: str
    email: str
    displayName: str
    photoUrl: str
    emailVerified: bool
    idToken: str  # New ID token (if returnSecureToken=true)
    refreshToken: str
    expiresIn: str


class LookupUserInfo(TypedDict, total=False):
    localId: str
    email: str
    emailVerified: bool
    displayName: str
    photoUrl: str
    createdAt: str  # milliseconds since epoch, as a string
    lastLoginAt: str
    disabled: bool


class LookupResponse(TypedDict, total=False):
    kind: str
    users: list[LookupUserInfo]
