from typing import ClassVar

from authkit.auth.exceptions import BiometricNotImplementedError
from authkit.auth.providers.base import AuthProvider, Capability, ProviderKind
from authkit.user.models import User


class BiometricProvider(AuthProvider):
    """Placeholder for device biometric gating.

    Every operation fails loudly so that no caller believes it is protected
    by a biometric check that never ran.
    """

    kind = ProviderKind.biometric
    capabilities: ClassVar[frozenset[Capability]] = frozenset(
        {Capability.sign_in, Capability.enable, Capability.disable}
    )

    async def enable(self) -> None:
        raise BiometricNotImplementedError()

    async def disable(self) -> None:
        raise BiometricNotImplementedError()

    async def sign_in(self) -> User:
        raise BiometricNotImplementedError()
